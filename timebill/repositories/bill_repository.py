from typing import List, Optional

from sqlalchemy.orm import Session
from sqlalchemy import desc

from timebill.repositories.base_repository import BaseRepository
from timebill.models import Bill, BillStatus, BillType


class BillRepository(BaseRepository[Bill]):
    """Repository for Bill operations."""

    def __init__(self, db: Session):
        super().__init__(Bill, db)

    def get_bills(
        self,
        client_id: Optional[int] = None,
        status: Optional[BillStatus] = None,
        bill_type: Optional[BillType] = None,
    ) -> List[Bill]:
        """List bills, latest issue date first"""
        query = self.db.query(Bill)

        if client_id is not None:
            query = query.filter(Bill.client_id == client_id)
        if status is not None:
            query = query.filter(Bill.status == status)
        if bill_type is not None:
            query = query.filter(Bill.bill_type == bill_type)

        return query.order_by(desc(Bill.issue_date), desc(Bill.id)).all()

    def get_by_number(self, bill_number: str) -> Optional[Bill]:
        return self.db.query(Bill).filter(Bill.bill_number == bill_number).first()

    def last_sequence_with_prefix(self, number_prefix: str) -> int:
        """
        Highest sequence in use for a prefix such as ``INV-2024-``.

        Takes the larger of the bill count and the highest numeric suffix, so
        numbers freed by deleted bills are never handed out again.
        """
        numbers = (
            self.db.query(Bill.bill_number)
            .filter(Bill.bill_number.like(f"{number_prefix}%"))
            .all()
        )
        highest = 0
        for (bill_number,) in numbers:
            suffix = bill_number[len(number_prefix):]
            if suffix.isdigit():
                highest = max(highest, int(suffix))
        return max(highest, len(numbers))

    def add_bill(self, bill: Bill) -> Bill:
        """Insert inside the caller's transaction; raises IntegrityError on a taken number"""
        self.db.add(bill)
        self.db.flush()
        return bill

    def delete_bill(self, bill_id: int) -> int:
        """Delete the row inside the caller's transaction; returns rows removed"""
        return (
            self.db.query(Bill)
            .filter(Bill.id == bill_id)
            .delete(synchronize_session=False)
        )
