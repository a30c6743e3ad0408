from datetime import datetime
from enum import StrEnum

from sqlalchemy import Column, Date, DateTime, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import relationship

from timebill.db.base import Base


class BillType(StrEnum):
    INVOICE = "invoice"
    ACT = "act"


class BillStatus(StrEnum):
    DRAFT = "draft"
    ISSUED = "issued"
    PAID = "paid"
    CANCELLED = "cancelled"


# Allowed status changes; paid and cancelled are terminal
BILL_STATUS_TRANSITIONS = {
    BillStatus.DRAFT: {BillStatus.ISSUED, BillStatus.CANCELLED},
    BillStatus.ISSUED: {BillStatus.PAID, BillStatus.CANCELLED},
    BillStatus.PAID: set(),
    BillStatus.CANCELLED: set(),
}

BILL_NUMBER_PREFIXES = {
    BillType.INVOICE: "INV",
    BillType.ACT: "ACT",
}


class Bill(Base):
    __tablename__ = "bills"

    id = Column(Integer, primary_key=True, index=True)
    client_id = Column(Integer, ForeignKey("clients.id"), nullable=False, index=True)
    bill_number = Column(String, unique=True, index=True, nullable=False)
    bill_type = Column(String, nullable=False, default=BillType.INVOICE)
    issue_date = Column(Date, nullable=False)

    # Snapshot of the entries at generation time
    period_from = Column(Date, nullable=True)
    period_to = Column(Date, nullable=True)
    total_hours = Column(Integer, nullable=False, default=0)
    total_minutes = Column(Integer, nullable=False, default=0)
    total_amount = Column(Numeric(12, 2), nullable=False, default=0)

    status = Column(String, nullable=False, default=BillStatus.DRAFT)
    notes = Column(Text, nullable=True)

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships; entries reference the bill, the bill stores no ids
    client = relationship("Client", back_populates="bills")
    time_entries = relationship(
        "TimeEntry",
        back_populates="bill",
        order_by="[TimeEntry.work_date, TimeEntry.id]",
    )
