# scripts/seed_data.py
import sys
from datetime import date, timedelta
from decimal import Decimal
from pathlib import Path

# Add the parent directory to sys.path
sys.path.insert(0, str(Path(__file__).parent.parent))

from sqlalchemy.orm import Session

from timebill import models
from timebill.db.base import SessionLocal
from timebill.db.session import init_db


def seed_clients(db: Session):
    """Create demo clients, or refresh their rates if they already exist."""
    clients = [
        {"name": "Acme Corp", "hourly_rate": Decimal("1800.00"), "activity_category": "Acme"},
        {"name": "Globex", "hourly_rate": Decimal("1200.00"), "activity_category": "globex"},
        {"name": "Initech", "hourly_rate": Decimal("950.00"), "activity_category": None},
    ]

    seeded = []
    for client_data in clients:
        client = db.query(models.Client).filter_by(name=client_data["name"]).first()
        if not client:
            client = models.Client(**client_data)
        else:
            for key, value in client_data.items():
                setattr(client, key, value)
        db.add(client)
        db.commit()
        db.refresh(client)
        seeded.append(client)
    return seeded


def seed_work(db: Session, client: models.Client, days: int = 5):
    """Add a week of unbilled manual entries and one payment for a client."""
    if db.query(models.TimeEntry).filter_by(client_id=client.id).first():
        return

    start = date.today() - timedelta(days=days)
    for offset in range(days):
        entry = models.TimeEntry(
            client_id=client.id,
            work_date=start + timedelta(days=offset),
            hours=2 + offset % 3,
            minutes=15 * (offset % 4),
            source=models.TimeEntrySource.MANUAL,
            notes="Seeded entry",
        )
        entry.recalculate_total()
        db.add(entry)

    db.add(
        models.Payment(
            client_id=client.id,
            payment_date=date.today(),
            payment_type=models.PaymentType.MONEY,
            amount=Decimal("10000.00"),
            notes="Seeded advance",
        )
    )
    db.commit()


def main():
    """Main function to seed data."""
    init_db()
    db = SessionLocal()
    try:
        for client in seed_clients(db):
            seed_work(db, client)
        print("Database seeded successfully!")
    finally:
        db.close()


if __name__ == "__main__":
    main()
