from datetime import datetime, date
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from timebill.models.payment import PaymentType
from timebill.schemas.types import Money


def check_payment_rules(
    payment_type: Optional[str],
    amount: Optional[Money],
    supplements_description: Optional[str],
) -> None:
    """Type-specific requirements shared by create and the merged update state."""
    if payment_type == PaymentType.MONEY and (amount is None or amount <= 0):
        raise ValueError('amount must be a positive number when payment_type is "money"')
    if payment_type == PaymentType.SUPPLEMENTS and not (
        supplements_description and supplements_description.strip()
    ):
        raise ValueError(
            'supplements_description is required when payment_type is "supplements"'
        )


# Base schemas
class PaymentBase(BaseModel):
    client_id: int = Field(gt=0)
    payment_date: date
    payment_type: PaymentType
    amount: Optional[Money] = Field(default=None, ge=0)
    supplements_description: Optional[str] = None
    notes: Optional[str] = None


# Create schemas
class PaymentCreate(PaymentBase):
    @model_validator(mode="after")
    def check_type_rules(self):
        check_payment_rules(
            self.payment_type, self.amount, self.supplements_description
        )
        return self


# Update schemas
class PaymentUpdate(BaseModel):
    client_id: Optional[int] = Field(default=None, gt=0)
    payment_date: Optional[date] = None
    payment_type: Optional[PaymentType] = None
    amount: Optional[Money] = Field(default=None, ge=0)
    supplements_description: Optional[str] = None
    notes: Optional[str] = None


# Response schemas
class Payment(PaymentBase):
    id: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class PaymentTypeTotal(BaseModel):
    payment_type: PaymentType
    count: int
    total_amount: Money


class PaymentOverallTotal(BaseModel):
    count: int
    total_amount: Money


class PaymentTotals(BaseModel):
    client_id: int
    by_type: list[PaymentTypeTotal]
    overall: PaymentOverallTotal

    def amount_for(self, payment_type: PaymentType) -> Money:
        for row in self.by_type:
            if row.payment_type == payment_type:
                return row.total_amount
        return Decimal("0")
