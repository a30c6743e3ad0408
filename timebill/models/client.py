from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, Integer, Numeric, String, Text
from sqlalchemy.orm import relationship

from timebill.db.base import Base


class Client(Base):
    __tablename__ = "clients"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, unique=True, index=True, nullable=False)
    hourly_rate = Column(Numeric(12, 2), nullable=False, default=0)

    # Category name used to look up tracked time in ActivityWatch
    activity_category = Column(String, nullable=True)

    is_active = Column(Boolean(), default=True, nullable=False)
    contact_info = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships (clients are soft-deleted, so nothing cascades)
    time_entries = relationship("TimeEntry", back_populates="client")
    payments = relationship("Payment", back_populates="client")
    bills = relationship("Bill", back_populates="client")
