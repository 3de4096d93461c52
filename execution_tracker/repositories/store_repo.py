# execution_tracker/repositories/store_repo.py
from typing import Iterable, List, Optional

from sqlalchemy.orm import Session

from execution_tracker.models.store import Store, Brand


class StoreRepository:
    def __init__(self, db: Session):
        self.db = db

    def list_all(self) -> List[Store]:
        return self.db.query(Store).order_by(Store.name.asc()).all()

    def get_by_id(self, store_id: str) -> Optional[Store]:
        return self.db.query(Store).filter(Store.id == store_id).first()

    def get_by_name(self, name: str) -> Optional[Store]:
        return self.db.query(Store).filter(Store.name == name).first()

    def list_eligible_for(self, brand_name: str) -> List[Store]:
        # JSON containment differs per dialect, the store table is small
        return [s for s in self.list_all() if brand_name in (s.eligible_brands or [])]

    def create(self, name: str, eligible_brands: Optional[List[str]] = None) -> Store:
        store = Store(name=name, eligible_brands=list(eligible_brands or []))
        self.db.add(store)
        self.db.commit()
        self.db.refresh(store)
        return store

    def upsert_names(self, names: Iterable[str]) -> int:
        """Insert stores that do not exist yet, leaving existing rows untouched."""
        existing = {name for (name,) in self.db.query(Store.name).all()}
        created = 0
        for name in names:
            if name in existing:
                continue
            self.db.add(Store(name=name, eligible_brands=[]))
            existing.add(name)
            created += 1
        self.db.commit()
        return created

    def set_eligible_brands(self, store: Store, brands: List[str]) -> None:
        # Assign a new list so the JSON column is flagged dirty
        store.eligible_brands = list(brands)
        self.db.add(store)


class BrandRepository:
    def __init__(self, db: Session):
        self.db = db

    def list_all(self) -> List[Brand]:
        return self.db.query(Brand).order_by(Brand.name.asc()).all()

    def get_by_id(self, brand_id: str) -> Optional[Brand]:
        return self.db.query(Brand).filter(Brand.id == brand_id).first()

    def get_by_name(self, name: str) -> Optional[Brand]:
        return self.db.query(Brand).filter(Brand.name == name).first()

    def create(self, name: str, payout_amount: int) -> Brand:
        brand = Brand(name=name, payout_amount=payout_amount)
        self.db.add(brand)
        self.db.flush()
        return brand

    def delete(self, brand: Brand) -> None:
        self.db.delete(brand)
