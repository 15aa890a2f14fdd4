"""Reimbursable expense grouping (client billing report).

Collects 'reimbursable' expenses inside an optional date range and groups
them per client so the report can show what to bill each one. Rows without
a client share a single bucket keyed by None.
"""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Dict, Iterable, List, Optional

from evofinz.services.tax_summary import CategoryTotal

if TYPE_CHECKING:  # pragma: no cover
    from evofinz.models.expense import ExpenseOut

NO_CLIENT_LABELS = {"es": "Sin cliente", "en": "No client"}


@dataclass
class ClientGroup:
    client_id: Optional[int]
    client_name: str
    expenses: List["ExpenseOut"] = field(default_factory=list)
    total: float = 0.0
    categories: Dict[str, CategoryTotal] = field(default_factory=dict)

    @property
    def count(self) -> int:
        return len(self.expenses)


@dataclass(frozen=True)
class ReimbursementReport:
    start_date: Optional[dt.date]
    end_date: Optional[dt.date]
    groups: List[ClientGroup]
    expenses: List["ExpenseOut"]
    total_reimbursable: float
    category_totals: Dict[str, float]

    @property
    def expense_count(self) -> int:
        return len(self.expenses)

    @property
    def average_per_expense(self) -> float:
        if not self.expenses:
            return 0.0
        return self.total_reimbursable / len(self.expenses)

    def share_of_total(self, amount: float) -> float:
        """Percentage (0-100) of the reimbursable total."""
        if self.total_reimbursable <= 0:
            return 0.0
        return amount / self.total_reimbursable * 100


def _in_range(
    day: dt.date, start_date: Optional[dt.date], end_date: Optional[dt.date]
) -> bool:
    if start_date and day < start_date:
        return False
    if end_date and day > end_date:
        return False
    return True


def group_reimbursements(
    expenses: Iterable["ExpenseOut"],
    start_date: Optional[dt.date] = None,
    end_date: Optional[dt.date] = None,
    language: str = "en",
) -> ReimbursementReport:
    rows = [
        e
        for e in expenses
        if e.status == "reimbursable" and _in_range(e.date, start_date, end_date)
    ]
    groups: Dict[Optional[int], ClientGroup] = {}
    category_totals: Dict[str, float] = {}
    total = 0.0

    for expense in rows:
        amount = float(expense.amount or 0)
        total += amount
        group = groups.get(expense.client_id)
        if group is None:
            name = expense.client_name or NO_CLIENT_LABELS.get(
                language, NO_CLIENT_LABELS["en"]
            )
            group = groups[expense.client_id] = ClientGroup(
                client_id=expense.client_id, client_name=name
            )
        group.expenses.append(expense)
        group.total += amount
        category = expense.category or "other"
        bucket = group.categories.setdefault(category, CategoryTotal())
        bucket.total += amount
        bucket.count += 1
        category_totals[category] = category_totals.get(category, 0.0) + amount

    ordered = sorted(groups.values(), key=lambda g: g.total, reverse=True)
    return ReimbursementReport(
        start_date=start_date,
        end_date=end_date,
        groups=ordered,
        expenses=rows,
        total_reimbursable=total,
        category_totals=category_totals,
    )


__all__ = [
    "NO_CLIENT_LABELS",
    "ClientGroup",
    "ReimbursementReport",
    "group_reimbursements",
]
