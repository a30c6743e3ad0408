import logging
from datetime import date
from typing import List, Optional

from sqlalchemy.orm import Session

from timebill.core.exceptions import (
    InvalidReferenceException,
    ResourceNotFoundException,
    ValidationException,
)
from timebill.models import Payment, PaymentType
from timebill.repositories.client_repository import ClientRepository
from timebill.repositories.payment_repository import PaymentRepository
from timebill.schemas.payment import (
    PaymentCreate,
    PaymentTotals,
    PaymentUpdate,
    check_payment_rules,
)
from timebill.utils.patch import reject_null_fields

# Set up module logger
logger = logging.getLogger(__name__)

_REQUIRED_FIELDS = ("client_id", "payment_date", "payment_type")


class PaymentService:
    """Service for the payment ledger."""

    def __init__(self, db: Session):
        self.db = db
        self.repository = PaymentRepository(db)
        self.client_repository = ClientRepository(db)

    def _ensure_client(self, client_id: int) -> None:
        if not self.client_repository.get(client_id):
            raise InvalidReferenceException(
                f"Client {client_id} does not exist", details={"client_id": client_id}
            )

    async def get_payment(self, payment_id: int) -> Payment:
        payment = self.repository.get(payment_id)
        if not payment:
            logger.warning(f"Payment {payment_id} not found")
            raise ResourceNotFoundException(
                f"Payment {payment_id} not found", details={"payment_id": payment_id}
            )
        return payment

    async def list_payments(
        self,
        client_id: Optional[int] = None,
        payment_type: Optional[PaymentType] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> List[Payment]:
        return self.repository.get_payments(
            client_id=client_id,
            payment_type=payment_type,
            date_from=date_from,
            date_to=date_to,
        )

    async def create_payment(self, data: PaymentCreate) -> Payment:
        self._ensure_client(data.client_id)
        payment = self.repository.create(data)
        logger.info(
            f"Recorded {payment.payment_type} payment {payment.id} for client {payment.client_id}"
        )
        return payment

    async def update_payment(self, payment_id: int, data: PaymentUpdate) -> Payment:
        payment = await self.get_payment(payment_id)
        reject_null_fields(data, _REQUIRED_FIELDS)

        patch = data.model_dump(exclude_unset=True)
        if "client_id" in patch and patch["client_id"] != payment.client_id:
            self._ensure_client(patch["client_id"])

        # Type rules apply to the row as it will be stored
        try:
            check_payment_rules(
                patch.get("payment_type", payment.payment_type),
                patch.get("amount", payment.amount),
                patch.get("supplements_description", payment.supplements_description),
            )
        except ValueError as e:
            raise ValidationException(str(e), details={"payment_id": payment_id})

        payment = self.repository.update(payment, patch)
        logger.info(f"Updated payment {payment.id}")
        return payment

    async def delete_payment(self, payment_id: int) -> bool:
        await self.get_payment(payment_id)
        self.repository.delete(payment_id)
        logger.info(f"Deleted payment {payment_id}")
        return True

    async def get_totals_by_client(self, client_id: int) -> PaymentTotals:
        return PaymentTotals(**self.repository.get_totals_by_client(client_id))
