# execution_tracker/models/store.py
import uuid

from sqlalchemy import Column, String, Integer, JSON

from execution_tracker.database import Base


class Store(Base):
    __tablename__ = "stores"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String, nullable=False, unique=True)

    # Names of the brand contests this store takes part in
    eligible_brands = Column(JSON, nullable=False, default=list)

    def __repr__(self) -> str:
        return f"<Store(id={self.id}, name={self.name})>"


class Brand(Base):
    """A brand contest with a weekly payout."""

    __tablename__ = "brands"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String, nullable=False, unique=True)
    payout_amount = Column(Integer, nullable=False, default=0)

    def __repr__(self) -> str:
        return f"<Brand(id={self.id}, name={self.name}, payout_amount={self.payout_amount})>"
