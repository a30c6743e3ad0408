import logging
from datetime import date

from fastapi import APIRouter, Depends, Query, status

from timebill.api.deps import get_activity_import_service
from timebill.core.logging import log_context
from timebill.schemas.activity import (
    ActivityBuckets,
    ActivityCategories,
    ActivityDuration,
    ActivityImportRequest,
    ActivityImportResult,
    ActivityStatus,
)
from timebill.services.activity_import_service import ActivityImportService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/status", response_model=ActivityStatus)
async def get_activity_status(
    activity_service: ActivityImportService = Depends(get_activity_import_service()),
) -> ActivityStatus:
    """Check whether ActivityWatch is reachable"""
    with log_context(action="activity_status"):
        return await activity_service.get_status()


@router.get("/buckets", response_model=ActivityBuckets)
async def list_activity_buckets(
    activity_service: ActivityImportService = Depends(get_activity_import_service()),
) -> ActivityBuckets:
    """ActivityWatch buckets, e.g. to check which watchers are reporting"""
    with log_context(action="activity_buckets"):
        return await activity_service.list_buckets()


@router.get("/categories", response_model=ActivityCategories)
async def list_activity_categories(
    activity_service: ActivityImportService = Depends(get_activity_import_service()),
) -> ActivityCategories:
    """Values a client's activity_category can be set to"""
    with log_context(action="activity_categories"):
        return await activity_service.list_categories()


@router.get("/time", response_model=ActivityDuration)
async def get_activity_time(
    category: str = Query(..., min_length=1),
    work_date: date = Query(...),
    exclude_afk: bool = Query(False),
    activity_service: ActivityImportService = Depends(get_activity_import_service()),
) -> ActivityDuration:
    """Tracked time for a category on one working day"""
    with log_context(action="activity_time", category=category):
        return await activity_service.get_time(category, work_date, exclude_afk)


@router.post(
    "/import", response_model=ActivityImportResult, status_code=status.HTTP_201_CREATED
)
async def import_activity_time(
    data: ActivityImportRequest,
    activity_service: ActivityImportService = Depends(get_activity_import_service()),
) -> ActivityImportResult:
    """Create a time entry from tracked ActivityWatch time"""
    with log_context(client_id=data.client_id, action="activity_import"):
        logger.info(f"Importing activity time for client {data.client_id} on {data.work_date}")
        return await activity_service.import_time_entry(data)
