from __future__ import annotations

import datetime as dt
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator, model_validator


class ClientBase(BaseModel):
    name: str
    email: Optional[str] = None
    country: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("name cannot be empty")
        return value.strip()

    @field_validator("country")
    @classmethod
    def _upper_country(cls, value: Optional[str]) -> Optional[str]:
        return value.strip().upper() if value else value


class ClientCreate(ClientBase):
    pass


class ClientUpdate(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    country: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, value: Optional[str]) -> Optional[str]:
        # Only runs for explicitly provided values; None would clear a NOT NULL column.
        if value is None or not value.strip():
            raise ValueError("name cannot be empty")
        return value.strip()

    @model_validator(mode="after")
    def _at_least_one(self) -> "ClientUpdate":
        if not self.model_fields_set:
            raise ValueError("at least one field must be provided for update")
        return self


class ClientOut(ClientBase):
    model_config = ConfigDict(from_attributes=True)

    id: int
    created_at: dt.datetime
    updated_at: dt.datetime
