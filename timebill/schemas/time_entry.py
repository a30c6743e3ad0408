from datetime import datetime, date
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from timebill.models.time_entry import TimeEntrySource


# Base schemas
class TimeEntryBase(BaseModel):
    client_id: int = Field(gt=0)
    work_date: date
    hours: int = Field(default=0, ge=0)
    minutes: int = Field(default=0, ge=0, lt=60)
    source: TimeEntrySource = TimeEntrySource.MANUAL
    exclude_afk: bool = False
    notes: Optional[str] = None


# Create schemas
class TimeEntryCreate(TimeEntryBase):
    pass


# Update schemas; billing state is owned by the billing service
class TimeEntryUpdate(BaseModel):
    client_id: Optional[int] = Field(default=None, gt=0)
    work_date: Optional[date] = None
    hours: Optional[int] = Field(default=None, ge=0)
    minutes: Optional[int] = Field(default=None, ge=0, lt=60)
    source: Optional[TimeEntrySource] = None
    exclude_afk: Optional[bool] = None
    notes: Optional[str] = None


# Response schemas
class TimeEntry(TimeEntryBase):
    id: int
    total_minutes: int
    is_billed: bool
    bill_id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class TimeTotals(BaseModel):
    client_id: Optional[int] = None
    total_entries: int
    total_minutes: int
    total_hours: int
    remaining_minutes: int
    formatted_time: str


class TimeEntryList(BaseModel):
    items: list[TimeEntry]
    total: int
