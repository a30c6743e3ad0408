import logging
from datetime import date
from typing import Optional

from sqlalchemy.orm import Session

from timebill.core.exceptions import BusinessException, InvalidReferenceException
from timebill.integrations.activitywatch import TimeDurationProvider, get_activity_provider
from timebill.models import Client, TimeEntrySource
from timebill.repositories.client_repository import ClientRepository
from timebill.repositories.time_entry_repository import TimeEntryRepository
from timebill.schemas.activity import (
    ActivityBuckets,
    ActivityCategories,
    ActivityDuration,
    ActivityImportRequest,
    ActivityImportResult,
    ActivityStatus,
)
from timebill.schemas.time_entry import TimeEntry as TimeEntrySchema
from timebill.schemas.time_entry import TimeEntryCreate

# Set up module logger
logger = logging.getLogger(__name__)


class ActivityImportService:
    """Service that turns tracked activity time into time entries."""

    def __init__(self, db: Session, provider: Optional[TimeDurationProvider] = None):
        self.provider = provider or get_activity_provider()
        self.client_repository = ClientRepository(db)
        self.time_entry_repository = TimeEntryRepository(db)

    def _resolve_category(self, client: Client, category: Optional[str]) -> str:
        category = (category or client.activity_category or "").strip()
        if not category:
            raise BusinessException(
                f"No activity category given and client {client.id} has none configured",
                code="missing_activity_category",
                details={"client_id": client.id},
            )
        return category

    async def get_status(self) -> ActivityStatus:
        return await self.provider.get_status()

    async def list_buckets(self) -> ActivityBuckets:
        return await self.provider.list_buckets()

    async def list_categories(self) -> ActivityCategories:
        return await self.provider.list_categories()

    async def get_time(
        self, category: str, work_date: date, exclude_afk: bool = False
    ) -> ActivityDuration:
        return await self.provider.get_duration(category, work_date, exclude_afk)

    async def import_time_entry(self, data: ActivityImportRequest) -> ActivityImportResult:
        client = self.client_repository.get(data.client_id)
        if not client:
            raise InvalidReferenceException(
                f"Client {data.client_id} does not exist",
                details={"client_id": data.client_id},
            )
        category = self._resolve_category(client, data.category)

        activity = await self.provider.get_duration(category, data.work_date, data.exclude_afk)

        time_entry = self.time_entry_repository.create_time_entry(
            TimeEntryCreate(
                client_id=client.id,
                work_date=data.work_date,
                hours=activity.hours,
                minutes=activity.minutes,
                source=TimeEntrySource.ACTIVITY_IMPORT,
                exclude_afk=data.exclude_afk,
                notes=f"Imported from ActivityWatch - Category: {category}",
            )
        )
        logger.info(
            f"Imported {activity.hours}h {activity.minutes}m of '{category}' "
            f"for client {client.id} on {data.work_date} as entry {time_entry.id}"
        )

        return ActivityImportResult(
            time_entry=TimeEntrySchema.model_validate(time_entry), activity=activity
        )
