import logging

from sqlalchemy.orm import Session

from timebill.core.exceptions import ClientNotFoundException
from timebill.models import PaymentType
from timebill.repositories.client_repository import ClientRepository
from timebill.repositories.payment_repository import PaymentRepository
from timebill.repositories.time_entry_repository import TimeEntryRepository
from timebill.schemas.balance import (
    Balance,
    BalanceReport,
    Earnings,
    PaymentsSummary,
    SupplementItem,
    TimeWorked,
    UnbilledSummary,
)
from timebill.schemas.client import ClientSummary
from timebill.schemas.payment import PaymentTotals
from timebill.utils.money import amount_for_minutes, require_hourly_rate, round_money

# Set up module logger
logger = logging.getLogger(__name__)


class BalanceService:
    """
    Service computing what a client has been charged for and what they paid.

    Every report is computed from the ledgers on request; nothing is cached
    or stored.
    """

    def __init__(self, db: Session):
        self.client_repository = ClientRepository(db)
        self.time_entry_repository = TimeEntryRepository(db)
        self.payment_repository = PaymentRepository(db)

    async def calculate_balance(self, client_id: int) -> BalanceReport:
        client = self.client_repository.get(client_id)
        if not client:
            logger.warning(f"Balance requested for unknown client {client_id}")
            raise ClientNotFoundException(
                f"Client {client_id} not found", details={"client_id": client_id}
            )
        hourly_rate = require_hourly_rate(client)

        worked = self.time_entry_repository.get_totals(client_id)
        earned = amount_for_minutes(worked["total_minutes"], hourly_rate)

        totals = PaymentTotals(**self.payment_repository.get_totals_by_client(client_id))
        money = round_money(totals.amount_for(PaymentType.MONEY))
        supplements = round_money(totals.amount_for(PaymentType.SUPPLEMENTS))
        other = round_money(totals.amount_for(PaymentType.OTHER))
        # "other" payments are reported but do not settle work
        total_paid = money + supplements

        supplements_list = [
            SupplementItem(
                id=payment.id,
                payment_date=payment.payment_date,
                amount=payment.amount,
                description=payment.supplements_description,
                notes=payment.notes,
            )
            for payment in self.payment_repository.get_payments(
                client_id=client_id, payment_type=PaymentType.SUPPLEMENTS
            )
        ]

        unbilled = self.time_entry_repository.get_totals(client_id, is_billed=False)

        balance_amount = round_money(total_paid - earned)

        return BalanceReport(
            client=ClientSummary.model_validate(client),
            time_worked=TimeWorked(
                total_hours=worked["total_hours"],
                total_minutes=worked["remaining_minutes"],
                total_minutes_sum=worked["total_minutes"],
                formatted_time=worked["formatted_time"],
                total_entries=worked["total_entries"],
            ),
            earnings=Earnings(total_amount=earned, hourly_rate=round_money(hourly_rate)),
            payments=PaymentsSummary(
                money=money,
                supplements=supplements,
                other=other,
                total_paid=total_paid,
                supplements_list=supplements_list,
            ),
            unbilled=UnbilledSummary(
                total_hours=unbilled["total_hours"],
                total_minutes=unbilled["remaining_minutes"],
                total_minutes_sum=unbilled["total_minutes"],
                formatted_time=unbilled["formatted_time"],
                amount=amount_for_minutes(unbilled["total_minutes"], hourly_rate),
                entries_count=unbilled["total_entries"],
            ),
            balance=Balance(
                amount=balance_amount,
                status="client_credit" if balance_amount >= 0 else "client_owes",
            ),
        )
