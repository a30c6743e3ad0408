# timebill/db/base.py
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker

from timebill.core.config import settings


def build_engine(db_url: str) -> Engine:
    """Create an engine; SQLite connections get foreign key enforcement."""
    if db_url.startswith("sqlite"):
        new_engine = create_engine(
            db_url, connect_args={"check_same_thread": False}
        )

        @event.listens_for(new_engine, "connect")
        def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        return new_engine

    return create_engine(db_url, pool_pre_ping=True)


engine = build_engine(str(settings.SQLALCHEMY_DATABASE_URI))
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()
