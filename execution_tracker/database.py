"""
Database connection setup
Creates SQLAlchemy engine and session
"""
from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from execution_tracker.config import get_settings

settings = get_settings()

connect_args = {}
if settings.database_url.startswith("sqlite"):
    # FastAPI runs sync dependencies in a threadpool
    connect_args["check_same_thread"] = False

# Create database engine
engine = create_engine(
    settings.database_url,
    pool_pre_ping=True,  # Check connections before using
    connect_args=connect_args,
)

# Create session factory
SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine
)

# Base class for models
Base = declarative_base()


def get_db():
    """
    Dependency for FastAPI routes
    Provides database session
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db(bind=None):
    """
    Initialize database
    Create all tables
    """
    # Import models so they're registered
    from execution_tracker.models import message, photo, store, sync_state  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)
