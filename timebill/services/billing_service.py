import logging
from datetime import date
from typing import Iterable, List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from timebill.core.config import settings
from timebill.core.exceptions import (
    AlreadyBilledException,
    DuplicateResourceException,
    EmptySelectionException,
    InvalidClientException,
    InvalidEntryException,
    InvalidStatusTransitionException,
    NoUnbilledEntriesException,
    ResourceNotFoundException,
)
from timebill.models import (
    BILL_NUMBER_PREFIXES,
    BILL_STATUS_TRANSITIONS,
    Bill,
    BillStatus,
    BillType,
    Client,
    TimeEntry,
)
from timebill.repositories.bill_repository import BillRepository
from timebill.repositories.client_repository import ClientRepository
from timebill.repositories.time_entry_repository import TimeEntryRepository
from timebill.schemas.bill import BillDeleted, BillOptions, BillUpdate
from timebill.utils.money import amount_for_minutes, require_hourly_rate
from timebill.utils.patch import reject_null_fields

# Set up module logger
logger = logging.getLogger(__name__)

_REQUIRED_FIELDS = (
    "bill_number",
    "bill_type",
    "issue_date",
    "total_hours",
    "total_minutes",
    "total_amount",
    "status",
)


class _BillNumberTaken(Exception):
    """Internal signal: the candidate bill number lost a race."""


def _unique_ids(entry_ids: Iterable[int]) -> List[int]:
    """Drop repeated ids, keeping the first occurrence."""
    seen = set()
    unique = []
    for entry_id in entry_ids:
        if entry_id not in seen:
            seen.add(entry_id)
            unique.append(entry_id)
    return unique


class BillingService:
    """
    Service that turns unbilled time entries into bills.

    A bill is created in a single transaction: the selected entries are
    re-validated, the bill row is inserted and the entries are linked to it
    with a conditional update. If any step fails the session is rolled back
    and no entry changes state.
    """

    def __init__(self, db: Session):
        self.db = db
        self.repository = BillRepository(db)
        self.client_repository = ClientRepository(db)
        self.time_entry_repository = TimeEntryRepository(db)

    def _get_client_or_fail(self, client_id: int) -> Client:
        client = self.client_repository.get(client_id)
        if not client:
            raise InvalidClientException(
                f"Client {client_id} does not exist", details={"client_id": client_id}
            )
        return client

    async def get_bill(self, bill_id: int) -> Bill:
        bill = self.repository.get(bill_id)
        if not bill:
            logger.warning(f"Bill {bill_id} not found")
            raise ResourceNotFoundException(
                f"Bill {bill_id} not found", details={"bill_id": bill_id}
            )
        return bill

    async def list_bills(
        self,
        client_id: Optional[int] = None,
        status: Optional[BillStatus] = None,
        bill_type: Optional[BillType] = None,
    ) -> List[Bill]:
        return self.repository.get_bills(
            client_id=client_id, status=status, bill_type=bill_type
        )

    def generate_bill_number(
        self, bill_type: BillType, issue_date: date, offset: int = 0
    ) -> str:
        """
        Next number in the per-type, per-year sequence, e.g. ``INV-2024-003``.

        Continues after the highest number in use, so gaps left by deleted
        bills are not reused. ``offset`` skips ahead when an earlier candidate
        was taken by a concurrent writer.
        """
        prefix = f"{BILL_NUMBER_PREFIXES[BillType(bill_type)]}-{issue_date.year}-"
        sequence = self.repository.last_sequence_with_prefix(prefix) + 1 + offset
        return f"{prefix}{sequence:03d}"

    def _validate_entries(self, client_id: int, entry_ids: List[int]) -> List[TimeEntry]:
        """Resolve every id; the first unusable one aborts the whole selection."""
        found = self.time_entry_repository.get_for_update(entry_ids)

        entries = []
        for entry_id in entry_ids:
            entry = found.get(entry_id)
            if entry is None:
                raise InvalidEntryException(
                    f"Time entry {entry_id} not found",
                    details={"time_entry_id": entry_id},
                )
            if entry.client_id != client_id:
                raise InvalidEntryException(
                    f"Time entry {entry_id} does not belong to client {client_id}",
                    details={"time_entry_id": entry_id, "client_id": client_id},
                )
            if entry.is_billed:
                raise AlreadyBilledException(
                    f"Time entry {entry_id} is already billed",
                    details={"time_entry_id": entry_id, "bill_id": entry.bill_id},
                )
            entries.append(entry)

        if not entries:
            raise EmptySelectionException("No time entries selected for billing")
        return entries

    def _create_bill_once(
        self,
        client: Client,
        entry_ids: List[int],
        options: BillOptions,
        attempt: int,
    ) -> Bill:
        """One attempt at the bill transaction; the caller commits or rolls back."""
        entries = self._validate_entries(client.id, entry_ids)

        minutes_sum = sum(entry.total_minutes for entry in entries)
        total_hours, total_minutes = divmod(minutes_sum, 60)
        total_amount = amount_for_minutes(minutes_sum, require_hourly_rate(client))
        issue_date = options.issue_date or date.today()

        bill = Bill(
            client_id=client.id,
            bill_number=self.generate_bill_number(options.bill_type, issue_date, attempt),
            bill_type=options.bill_type,
            issue_date=issue_date,
            period_from=min(entry.work_date for entry in entries),
            period_to=max(entry.work_date for entry in entries),
            total_hours=total_hours,
            total_minutes=total_minutes,
            total_amount=total_amount,
            status=options.status,
            notes=options.notes,
        )

        try:
            self.repository.add_bill(bill)
        except IntegrityError as e:
            raise _BillNumberTaken(bill.bill_number) from e

        changed = self.time_entry_repository.mark_billed(entry_ids, client.id, bill.id)
        if changed != len(entry_ids):
            # Another writer billed some of these entries after we read them
            raise AlreadyBilledException(
                "Some of the selected time entries were billed concurrently",
                details={"time_entry_ids": entry_ids},
            )
        return bill

    def _create_bill(
        self, client: Client, entry_ids: List[int], options: BillOptions
    ) -> Bill:
        for attempt in range(settings.BILL_NUMBER_MAX_RETRIES):
            try:
                bill = self._create_bill_once(client, entry_ids, options, attempt)
                self.db.commit()
            except _BillNumberTaken as e:
                self.db.rollback()
                logger.warning(f"Bill number {e} already taken, retrying")
                continue
            except Exception:
                self.db.rollback()
                raise

            self.db.refresh(bill)
            logger.info(
                f"Created bill {bill.bill_number} for client {bill.client_id}: "
                f"{len(entry_ids)} entries, {bill.total_hours}h {bill.total_minutes}m, "
                f"amount {bill.total_amount}"
            )
            return bill

        raise DuplicateResourceException(
            "Could not allocate a unique bill number",
            details={"attempts": settings.BILL_NUMBER_MAX_RETRIES},
        )

    async def generate_from_entries(
        self,
        client_id: int,
        entry_ids: Iterable[int],
        options: Optional[BillOptions] = None,
    ) -> Bill:
        client = self._get_client_or_fail(client_id)
        return self._create_bill(client, _unique_ids(entry_ids), options or BillOptions())

    async def generate_from_date_range(
        self,
        client_id: int,
        date_from: date,
        date_to: date,
        options: Optional[BillOptions] = None,
    ) -> Bill:
        client = self._get_client_or_fail(client_id)

        entries = self.time_entry_repository.get_unbilled_in_range(
            client_id, date_from, date_to
        )
        if not entries:
            raise NoUnbilledEntriesException(
                f"No unbilled time entries for client {client_id} "
                f"between {date_from} and {date_to}",
                details={
                    "client_id": client_id,
                    "date_from": date_from.isoformat(),
                    "date_to": date_to.isoformat(),
                },
            )

        return self._create_bill(
            client, [entry.id for entry in entries], options or BillOptions()
        )

    def _check_transition(self, bill: Bill, new_status: BillStatus) -> None:
        current = BillStatus(bill.status)
        if new_status == current or not settings.ENFORCE_BILL_STATUS_TRANSITIONS:
            return
        if new_status not in BILL_STATUS_TRANSITIONS[current]:
            raise InvalidStatusTransitionException(
                f"Bill status cannot change from {current} to {new_status}",
                details={"bill_id": bill.id, "from": current, "to": new_status},
            )

    async def update_bill(self, bill_id: int, data: BillUpdate) -> Bill:
        """Patch a bill; totals are taken as given and not checked against entries"""
        bill = await self.get_bill(bill_id)
        reject_null_fields(data, _REQUIRED_FIELDS)
        patch = data.model_dump(exclude_unset=True)

        if "status" in patch:
            self._check_transition(bill, patch["status"])

        new_number = patch.get("bill_number")
        if new_number and new_number != bill.bill_number:
            if self.repository.get_by_number(new_number):
                raise DuplicateResourceException(
                    f"Bill number {new_number} is already in use",
                    details={"bill_number": new_number},
                )

        try:
            bill = self.repository.update(bill, patch)
        except IntegrityError:
            self.db.rollback()
            raise DuplicateResourceException(
                f"Bill number {new_number} is already in use",
                details={"bill_number": new_number},
            )

        logger.info(f"Updated bill {bill.id}: {sorted(patch)}")
        return bill

    async def delete_bill(self, bill_id: int) -> BillDeleted:
        """Release the bill's entries back to unbilled, then remove the bill"""
        bill = await self.get_bill(bill_id)
        bill_number = bill.bill_number

        try:
            released = self.time_entry_repository.release_bill(bill_id)
            self.repository.delete_bill(bill_id)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        logger.info(f"Deleted bill {bill_number}, released {released} entries")
        return BillDeleted(id=bill_id, released_entries=released)
