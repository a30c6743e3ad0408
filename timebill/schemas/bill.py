from datetime import datetime, date
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from timebill.models.bill import BillStatus, BillType
from timebill.schemas.client import ClientSummary
from timebill.schemas.time_entry import TimeEntry
from timebill.schemas.types import Money


# Options shared by both generation paths
class BillOptions(BaseModel):
    bill_type: BillType = BillType.INVOICE
    issue_date: Optional[date] = None  # defaults to today
    status: BillStatus = BillStatus.DRAFT
    notes: Optional[str] = None


# Create schemas
class BillFromEntries(BillOptions):
    client_id: int = Field(gt=0)
    time_entry_ids: list[int] = Field(default_factory=list)

    def options(self) -> BillOptions:
        return BillOptions(**self.model_dump(include=set(BillOptions.model_fields)))


class BillFromRange(BillOptions):
    client_id: int = Field(gt=0)
    period_from: date
    period_to: date

    @model_validator(mode="after")
    def check_period(self):
        if self.period_from > self.period_to:
            raise ValueError("period_from must be before or equal to period_to")
        return self

    def options(self) -> BillOptions:
        return BillOptions(**self.model_dump(include=set(BillOptions.model_fields)))


# Update schemas
class BillUpdate(BaseModel):
    bill_number: Optional[str] = Field(default=None, min_length=1)
    bill_type: Optional[BillType] = None
    issue_date: Optional[date] = None
    period_from: Optional[date] = None
    period_to: Optional[date] = None
    total_hours: Optional[int] = Field(default=None, ge=0)
    total_minutes: Optional[int] = Field(default=None, ge=0, lt=60)
    total_amount: Optional[Money] = Field(default=None, ge=0)
    status: Optional[BillStatus] = None
    notes: Optional[str] = None


# Response schemas
class BillBase(BaseModel):
    id: int
    client_id: int
    bill_number: str
    bill_type: BillType
    issue_date: date
    period_from: Optional[date] = None
    period_to: Optional[date] = None
    total_hours: int
    total_minutes: int
    total_amount: Money
    status: BillStatus
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class Bill(BillBase):
    client: Optional[ClientSummary] = None
    time_entries: list[TimeEntry] = []


class BillList(BaseModel):
    items: list[BillBase]
    total: int


class BillDeleted(BaseModel):
    success: bool = True
    id: int
    released_entries: int
