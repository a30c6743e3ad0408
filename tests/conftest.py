"""
Shared fixtures and configuration for all tests.
"""
import os
from datetime import date
from decimal import Decimal

import pytest

# Override environment settings for testing
os.environ["ENVIRONMENT"] = "testing"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["BACKEND_CORS_ORIGINS"] = '["http://localhost:3000"]'
os.environ["SQLALCHEMY_DATABASE_URI"] = os.getenv(
    "TEST_DATABASE_URI", "sqlite:///./test_timebill.db"
)

from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from timebill.main import app
from timebill.db.base import Base, build_engine
from timebill.db.session import get_db
from timebill.models import Client, Payment, PaymentType, TimeEntry, TimeEntrySource


engine = build_engine(os.environ["SQLALCHEMY_DATABASE_URI"])
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


# Test fixtures for the database
@pytest.fixture
def db():
    """
    Create a fresh database for each test.
    """
    Base.metadata.create_all(bind=engine)

    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db):
    """Return a TestClient whose requests use the test database session."""

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db

    yield TestClient(app)

    app.dependency_overrides = {}


# Data factories
@pytest.fixture
def make_client(db):
    counter = {"n": 0}

    def _make_client(name=None, hourly_rate="600.00", activity_category=None, is_active=True):
        counter["n"] += 1
        obj = Client(
            name=name or f"Client {counter['n']}",
            hourly_rate=Decimal(hourly_rate),
            activity_category=activity_category,
            is_active=is_active,
        )
        db.add(obj)
        db.commit()
        db.refresh(obj)
        return obj

    return _make_client


@pytest.fixture
def make_entry(db):
    def _make_entry(client, work_date=date(2024, 6, 1), hours=1, minutes=0, notes=None):
        entry = TimeEntry(
            client_id=client.id,
            work_date=work_date,
            hours=hours,
            minutes=minutes,
            source=TimeEntrySource.MANUAL,
            notes=notes,
        )
        entry.recalculate_total()
        db.add(entry)
        db.commit()
        db.refresh(entry)
        return entry

    return _make_entry


@pytest.fixture
def make_payment(db):
    def _make_payment(
        client,
        payment_type=PaymentType.MONEY,
        amount="1000.00",
        payment_date=date(2024, 6, 10),
        supplements_description=None,
    ):
        payment = Payment(
            client_id=client.id,
            payment_date=payment_date,
            payment_type=payment_type,
            amount=Decimal(amount) if amount is not None else None,
            supplements_description=supplements_description,
        )
        db.add(payment)
        db.commit()
        db.refresh(payment)
        return payment

    return _make_payment
