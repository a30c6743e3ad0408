import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status

from timebill.api.deps import get_time_entry_service
from timebill.core.logging import log_context
from timebill.schemas.time_entry import (
    TimeEntry,
    TimeEntryCreate,
    TimeEntryList,
    TimeEntryUpdate,
    TimeTotals,
)
from timebill.services.time_entry_service import TimeEntryService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/", response_model=TimeEntryList)
async def list_time_entries(
    client_id: Optional[int] = Query(None),
    work_date: Optional[date] = Query(None),
    is_billed: Optional[bool] = Query(None),
    date_from: Optional[date] = Query(None),
    date_to: Optional[date] = Query(None),
    time_entry_service: TimeEntryService = Depends(get_time_entry_service()),
) -> TimeEntryList:
    """List time entries, newest work date first"""
    with log_context(action="list_time_entries", client_id=client_id):
        entries = await time_entry_service.list_time_entries(
            client_id=client_id,
            work_date=work_date,
            is_billed=is_billed,
            date_from=date_from,
            date_to=date_to,
        )
        return TimeEntryList(
            items=[TimeEntry.model_validate(entry) for entry in entries],
            total=len(entries),
        )


@router.get("/unbilled", response_model=TimeEntryList)
async def list_unbilled_time_entries(
    client_id: Optional[int] = Query(None),
    time_entry_service: TimeEntryService = Depends(get_time_entry_service()),
) -> TimeEntryList:
    with log_context(action="list_unbilled", client_id=client_id):
        entries = await time_entry_service.list_unbilled(client_id=client_id)
        return TimeEntryList(
            items=[TimeEntry.model_validate(entry) for entry in entries],
            total=len(entries),
        )


@router.get("/totals/{client_id}", response_model=TimeTotals)
async def get_time_totals(
    client_id: int,
    is_billed: Optional[bool] = Query(None),
    time_entry_service: TimeEntryService = Depends(get_time_entry_service()),
) -> TimeTotals:
    with log_context(action="get_time_totals", client_id=client_id):
        return await time_entry_service.get_totals(client_id, is_billed=is_billed)


@router.get("/{entry_id}", response_model=TimeEntry)
async def get_time_entry(
    entry_id: int,
    time_entry_service: TimeEntryService = Depends(get_time_entry_service()),
) -> TimeEntry:
    with log_context(action="get_time_entry", entry_id=entry_id):
        return await time_entry_service.get_time_entry(entry_id)


@router.post("/", response_model=TimeEntry, status_code=status.HTTP_201_CREATED)
async def create_time_entry(
    data: TimeEntryCreate,
    time_entry_service: TimeEntryService = Depends(get_time_entry_service()),
) -> TimeEntry:
    with log_context(action="create_time_entry", client_id=data.client_id):
        logger.info(f"Creating time entry for client {data.client_id} on {data.work_date}")
        return await time_entry_service.create_time_entry(data)


@router.patch("/{entry_id}", response_model=TimeEntry)
@router.put("/{entry_id}", response_model=TimeEntry, include_in_schema=False)
async def update_time_entry(
    entry_id: int,
    data: TimeEntryUpdate,
    time_entry_service: TimeEntryService = Depends(get_time_entry_service()),
) -> TimeEntry:
    """Update an unbilled time entry"""
    with log_context(action="update_time_entry", entry_id=entry_id):
        return await time_entry_service.update_time_entry(entry_id, data)


@router.delete("/{entry_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_time_entry(
    entry_id: int,
    time_entry_service: TimeEntryService = Depends(get_time_entry_service()),
) -> Response:
    with log_context(action="delete_time_entry", entry_id=entry_id):
        await time_entry_service.delete_time_entry(entry_id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)
