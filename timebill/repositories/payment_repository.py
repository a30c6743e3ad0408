from typing import Any, Dict, List, Optional
from datetime import date
from decimal import Decimal

from sqlalchemy.orm import Session
from sqlalchemy import desc, func

from timebill.repositories.base_repository import BaseRepository
from timebill.models import Payment, PaymentType


class PaymentRepository(BaseRepository[Payment]):
    """Repository for Payment operations."""

    def __init__(self, db: Session):
        super().__init__(Payment, db)

    def get_payments(
        self,
        client_id: Optional[int] = None,
        payment_type: Optional[PaymentType] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> List[Payment]:
        """List payments, newest first"""
        query = self.db.query(Payment)

        if client_id is not None:
            query = query.filter(Payment.client_id == client_id)
        if payment_type is not None:
            query = query.filter(Payment.payment_type == payment_type)
        if date_from is not None:
            query = query.filter(Payment.payment_date >= date_from)
        if date_to is not None:
            query = query.filter(Payment.payment_date <= date_to)

        return query.order_by(desc(Payment.payment_date), desc(Payment.id)).all()

    def get_totals_by_client(self, client_id: int) -> Dict[str, Any]:
        """Count and amount per payment type, plus overall figures"""
        rows = (
            self.db.query(
                Payment.payment_type,
                func.count(Payment.id),
                func.coalesce(func.sum(Payment.amount), 0),
            )
            .filter(Payment.client_id == client_id)
            .group_by(Payment.payment_type)
            .order_by(Payment.payment_type)
            .all()
        )

        by_type = [
            {
                "payment_type": payment_type,
                "count": int(count),
                "total_amount": Decimal(str(total or 0)),
            }
            for payment_type, count, total in rows
        ]

        return {
            "client_id": client_id,
            "by_type": by_type,
            "overall": {
                "count": sum(row["count"] for row in by_type),
                "total_amount": sum(
                    (row["total_amount"] for row in by_type), Decimal("0")
                ),
            },
        }
