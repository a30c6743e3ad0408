from datetime import date
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from timebill.schemas.time_entry import TimeEntry


class ActivityDuration(BaseModel):
    category: str
    work_date: date
    hours: int
    minutes: int
    total_seconds: int
    exclude_afk: bool = False


class ActivityImportRequest(BaseModel):
    client_id: int = Field(gt=0)
    work_date: date
    category: Optional[str] = None  # falls back to the client's activity_category
    exclude_afk: bool = False


class ActivityImportResult(BaseModel):
    time_entry: TimeEntry
    activity: ActivityDuration


class ActivityStatus(BaseModel):
    running: bool
    message: str
    url: str
    buckets: Optional[int] = None


class ActivityBuckets(BaseModel):
    count: int
    buckets: Dict[str, Any]


class ActivityCategories(BaseModel):
    categories: List[str]  # regex classes from the ActivityWatch settings
    apps: List[str]  # apps seen recently in the window watcher
