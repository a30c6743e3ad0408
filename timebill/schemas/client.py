from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from timebill.schemas.types import Money


def _clean_name(value: Optional[str]) -> Optional[str]:
    if value is None:
        return value
    value = value.strip()
    if not value:
        raise ValueError("Name cannot be empty")
    return value


# Base schemas
class ClientBase(BaseModel):
    name: str
    hourly_rate: Money = Field(ge=0)
    activity_category: Optional[str] = None
    is_active: bool = True
    contact_info: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("name")
    @classmethod
    def check_name(cls, v: Optional[str]) -> Optional[str]:
        return _clean_name(v)


# Create schemas
class ClientCreate(ClientBase):
    pass


# Update schemas
class ClientUpdate(BaseModel):
    name: Optional[str] = None
    hourly_rate: Optional[Money] = Field(default=None, ge=0)
    activity_category: Optional[str] = None
    is_active: Optional[bool] = None
    contact_info: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("name")
    @classmethod
    def check_name(cls, v: Optional[str]) -> Optional[str]:
        return _clean_name(v)


# Response schemas
class Client(ClientBase):
    id: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class ClientSummary(BaseModel):
    id: int
    name: str
    hourly_rate: Money

    model_config = ConfigDict(from_attributes=True)
