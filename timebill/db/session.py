"""
Database session management utilities.
"""

from typing import Generator

from sqlalchemy.orm import Session

# Re-export SessionLocal from base
from timebill.db.base import SessionLocal, Base, engine


def get_db() -> Generator[Session, None, None]:
    """
    Get a database session.

    Yields:
        SQLAlchemy database session
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db() -> None:
    """Create all tables that do not exist yet."""
    # Register every model on Base.metadata before create_all
    import timebill.models  # noqa: F401

    Base.metadata.create_all(bind=engine)
