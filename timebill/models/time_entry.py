from datetime import datetime
from enum import StrEnum

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import relationship

from timebill.db.base import Base


class TimeEntrySource(StrEnum):
    MANUAL = "manual"
    ACTIVITY_IMPORT = "activity-import"
    CSV_IMPORT = "csv-import"


class TimeEntry(Base):
    __tablename__ = "time_entries"
    __table_args__ = (
        CheckConstraint("hours >= 0", name="ck_time_entries_hours"),
        CheckConstraint("minutes >= 0 AND minutes < 60", name="ck_time_entries_minutes"),
    )

    id = Column(Integer, primary_key=True, index=True)
    client_id = Column(Integer, ForeignKey("clients.id"), nullable=False, index=True)
    work_date = Column(Date, nullable=False, index=True)

    # Duration; total_minutes is derived and rewritten on every save
    hours = Column(Integer, nullable=False, default=0)
    minutes = Column(Integer, nullable=False, default=0)
    total_minutes = Column(Integer, nullable=False, default=0)

    source = Column(String, nullable=False, default=TimeEntrySource.MANUAL)
    exclude_afk = Column(Boolean(), nullable=False, default=False)

    # Billing state: is_billed is True exactly when bill_id is set
    is_billed = Column(Boolean(), nullable=False, default=False, index=True)
    bill_id = Column(Integer, ForeignKey("bills.id"), nullable=True, index=True)

    notes = Column(Text, nullable=True)

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    client = relationship("Client", back_populates="time_entries")
    bill = relationship("Bill", back_populates="time_entries")

    def recalculate_total(self) -> None:
        self.total_minutes = (self.hours or 0) * 60 + (self.minutes or 0)
