from datetime import date
from typing import Literal, Optional

from pydantic import BaseModel

from timebill.schemas.client import ClientSummary
from timebill.schemas.types import Money


class TimeWorked(BaseModel):
    total_hours: int
    total_minutes: int  # remainder after whole hours
    total_minutes_sum: int
    formatted_time: str
    total_entries: int


class Earnings(BaseModel):
    total_amount: Money
    hourly_rate: Money


class SupplementItem(BaseModel):
    id: int
    payment_date: date
    amount: Optional[Money] = None
    description: Optional[str] = None
    notes: Optional[str] = None


class PaymentsSummary(BaseModel):
    money: Money
    supplements: Money
    other: Money
    total_paid: Money
    supplements_list: list[SupplementItem]


class UnbilledSummary(BaseModel):
    total_hours: int
    total_minutes: int
    total_minutes_sum: int
    formatted_time: str
    amount: Money
    entries_count: int


class Balance(BaseModel):
    amount: Money
    status: Literal["client_credit", "client_owes"]


class BalanceReport(BaseModel):
    client: ClientSummary
    time_worked: TimeWorked
    earnings: Earnings
    payments: PaymentsSummary
    unbilled: UnbilledSummary
    balance: Balance
