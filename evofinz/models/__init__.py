"""Pydantic domain models for EvoFinz expenses and clients."""

from .constants import (
    CURRENCIES,
    STATUSES,
    CATEGORIES,
    LANGUAGES,
)  # re-export
from .expense import ExpenseIn, ExpenseOut, ExpenseUpdateIn
from .client import ClientCreate, ClientOut, ClientUpdate

__all__ = [
    "CURRENCIES",
    "STATUSES",
    "CATEGORIES",
    "LANGUAGES",
    "ExpenseIn",
    "ExpenseOut",
    "ExpenseUpdateIn",
    "ClientCreate",
    "ClientOut",
    "ClientUpdate",
]
