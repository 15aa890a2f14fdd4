from __future__ import annotations
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from typing import List, Optional
import datetime as dt
from .constants import CURRENCIES, DEFAULT_CURRENCY, STATUSES


def _normalize_tags(tags: Optional[List[str]]) -> Optional[List[str]]:
    if tags is None:
        return None
    # Remove duplicates while preserving order
    seen = set()
    unique = []
    for tag in tags:
        name = tag.strip()
        if name and name.lower() not in seen:
            seen.add(name.lower())
            unique.append(name)
    return unique


class ExpenseIn(BaseModel):
    date: dt.date
    amount: float = Field(..., ge=0)
    vendor: Optional[str] = None
    description: Optional[str] = None
    category: str = "other"
    currency: str = DEFAULT_CURRENCY
    status: str = "pending"
    client_id: Optional[int] = None
    tags: List[str] = Field(default_factory=list)
    notes: Optional[str] = None
    reimbursement_type: Optional[str] = None

    @field_validator("currency")
    @classmethod
    def valid_currency(cls, v: str) -> str:
        v = v.upper().strip()
        if v not in CURRENCIES:
            raise ValueError("unsupported currency")
        return v

    @field_validator("category")
    @classmethod
    def normalize_category(cls, v: str) -> str:
        # Unknown categories are allowed; they fall back to 100% / line 9270.
        v = v.strip().lower()
        return v or "other"

    @field_validator("status")
    @classmethod
    def valid_status(cls, v: str) -> str:
        v = v.strip().lower()
        if v not in STATUSES:
            raise ValueError("unsupported status")
        return v

    @field_validator("tags")
    @classmethod
    def unique_tags(cls, v: List[str]) -> List[str]:
        return _normalize_tags(v) or []


class ExpenseOut(ExpenseIn):
    model_config = ConfigDict(from_attributes=True)

    id: int
    client_name: Optional[str] = None
    created_at: dt.datetime
    updated_at: dt.datetime


class ExpenseUpdateIn(BaseModel):
    """Partial update model.

    All fields optional; at least one must be provided.
    """

    date: Optional[dt.date] = None
    amount: Optional[float] = Field(None, ge=0)
    vendor: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    currency: Optional[str] = None
    status: Optional[str] = None
    client_id: Optional[int] = None
    tags: Optional[List[str]] = None
    notes: Optional[str] = None
    reimbursement_type: Optional[str] = None

    @field_validator("currency")
    @classmethod
    def valid_currency(cls, v):  # type: ignore[override]
        if v is None:
            return v
        v = v.upper().strip()
        if v not in CURRENCIES:
            raise ValueError("unsupported currency")
        return v

    @field_validator("category")
    @classmethod
    def normalize_category(cls, v):  # type: ignore[override]
        if v is None:
            return v
        return v.strip().lower() or "other"

    @field_validator("status")
    @classmethod
    def valid_status(cls, v):  # type: ignore[override]
        if v is not None:
            v = v.strip().lower()
            if v not in STATUSES:
                raise ValueError("unsupported status")
        return v

    @field_validator("tags")
    @classmethod
    def unique_tags(cls, v):  # type: ignore[override]
        return _normalize_tags(v)

    @model_validator(mode="after")
    def at_least_one(self) -> "ExpenseUpdateIn":
        if not self.model_fields_set:
            raise ValueError("at least one field must be provided for update")
        return self
