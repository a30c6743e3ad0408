import logging
from datetime import date
from typing import List, Optional

from sqlalchemy.orm import Session

from timebill.core.exceptions import (
    BilledEntryLockedException,
    InvalidReferenceException,
    ResourceNotFoundException,
)
from timebill.models import TimeEntry
from timebill.repositories.client_repository import ClientRepository
from timebill.repositories.time_entry_repository import TimeEntryRepository
from timebill.schemas.time_entry import TimeEntryCreate, TimeEntryUpdate, TimeTotals
from timebill.utils.patch import reject_null_fields

# Set up module logger
logger = logging.getLogger(__name__)

_REQUIRED_FIELDS = ("client_id", "work_date", "hours", "minutes", "source", "exclude_afk")


class TimeEntryService:
    """Service for the time ledger."""

    def __init__(self, db: Session):
        self.db = db
        self.repository = TimeEntryRepository(db)
        self.client_repository = ClientRepository(db)

    def _ensure_client(self, client_id: int) -> None:
        if not self.client_repository.get(client_id):
            raise InvalidReferenceException(
                f"Client {client_id} does not exist", details={"client_id": client_id}
            )

    async def get_time_entry(self, entry_id: int) -> TimeEntry:
        time_entry = self.repository.get(entry_id)
        if not time_entry:
            logger.warning(f"Time entry {entry_id} not found")
            raise ResourceNotFoundException(
                f"Time entry {entry_id} not found", details={"time_entry_id": entry_id}
            )
        return time_entry

    async def list_time_entries(
        self,
        client_id: Optional[int] = None,
        work_date: Optional[date] = None,
        is_billed: Optional[bool] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> List[TimeEntry]:
        return self.repository.get_time_entries(
            client_id=client_id,
            work_date=work_date,
            is_billed=is_billed,
            date_from=date_from,
            date_to=date_to,
        )

    async def list_unbilled(self, client_id: Optional[int] = None) -> List[TimeEntry]:
        return self.repository.get_unbilled(client_id=client_id)

    async def create_time_entry(self, data: TimeEntryCreate) -> TimeEntry:
        self._ensure_client(data.client_id)
        time_entry = self.repository.create_time_entry(data)
        logger.info(
            f"Created time entry {time_entry.id} for client {time_entry.client_id}: "
            f"{time_entry.total_minutes} min on {time_entry.work_date}"
        )
        return time_entry

    async def update_time_entry(self, entry_id: int, data: TimeEntryUpdate) -> TimeEntry:
        time_entry = await self.get_time_entry(entry_id)

        if time_entry.is_billed:
            raise BilledEntryLockedException(
                f"Time entry {entry_id} belongs to bill {time_entry.bill_id} and cannot be edited",
                details={"time_entry_id": entry_id, "bill_id": time_entry.bill_id},
            )

        reject_null_fields(data, _REQUIRED_FIELDS)
        if data.client_id is not None and data.client_id != time_entry.client_id:
            self._ensure_client(data.client_id)

        time_entry = self.repository.update_time_entry(time_entry, data)
        logger.info(f"Updated time entry {time_entry.id}")
        return time_entry

    async def delete_time_entry(self, entry_id: int) -> bool:
        time_entry = await self.get_time_entry(entry_id)
        if time_entry.is_billed:
            # Bill totals stay as they were when the bill was generated
            logger.warning(
                f"Deleting time entry {entry_id} that belongs to bill {time_entry.bill_id}"
            )
        self.repository.delete_time_entry(time_entry)
        logger.info(f"Deleted time entry {entry_id}")
        return True

    async def get_totals(
        self, client_id: int, is_billed: Optional[bool] = None
    ) -> TimeTotals:
        return TimeTotals(**self.repository.get_totals(client_id, is_billed=is_billed))
