from datetime import datetime
from enum import StrEnum

from sqlalchemy import Column, Date, DateTime, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import relationship

from timebill.db.base import Base


class PaymentType(StrEnum):
    MONEY = "money"
    SUPPLEMENTS = "supplements"
    OTHER = "other"


class Payment(Base):
    __tablename__ = "payments"

    id = Column(Integer, primary_key=True, index=True)
    client_id = Column(Integer, ForeignKey("clients.id"), nullable=False, index=True)
    payment_date = Column(Date, nullable=False, index=True)
    payment_type = Column(String, nullable=False)

    # Required for money payments, optional valuation for supplements/other
    amount = Column(Numeric(12, 2), nullable=True)
    supplements_description = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    client = relationship("Client", back_populates="payments")
