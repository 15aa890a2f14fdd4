"""Domain-level expense validation.

Pydantic model validation already enforces field-level rules (amount >= 0,
known currency and status). This hook adds checks that need the database:
the referenced client must exist. Routes call `validate_expense_domain`
before any DAL write.
"""

from __future__ import annotations
from typing import TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover
    from evofinz.db.dal import Database
    from evofinz.models.expense import ExpenseIn


class ExpenseValidationError(ValueError):
    pass


def validate_expense_domain(expense: "ExpenseIn", db: "Database") -> "ExpenseIn":
    """Raise ExpenseValidationError for rules that span rows; return the expense."""
    if expense.client_id is not None and not db.client_exists(expense.client_id):
        raise ExpenseValidationError(f"client {expense.client_id} does not exist")
    return expense
