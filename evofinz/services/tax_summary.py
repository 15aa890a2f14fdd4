from __future__ import annotations

from collections import OrderedDict
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Dict, Iterable, List, Optional, Sequence

from evofinz.services.deductions import calculate_deduction
from evofinz.services.tax_rules import (
    DEFAULT_T2125_LINE,
    T2125_LINES,
    t2125_line_for,
)

if TYPE_CHECKING:  # pragma: no cover
    from evofinz.models.expense import ExpenseOut

"""Tax aggregation helpers.

Scopes implemented:
    - Year filtering and available years
    - Tax summary (totals + per-category breakdown of deductible rows)
    - Monthly totals
    - T2125 line totals and the HST/GST / ITC estimate

Design notes:
    Every function is pure over an already-fetched list of expenses; callers
    (routers, exporters) pass a snapshot list and get immutable results back.
"""

DEFAULT_HST_RATE = 0.13


def filter_by_year(
    expenses: Iterable["ExpenseOut"], year: Optional[int] = None
) -> List["ExpenseOut"]:
    if year is None:
        return list(expenses)
    return [e for e in expenses if e.date.year == year]


def available_years(expenses: Iterable["ExpenseOut"]) -> List[int]:
    return sorted({e.date.year for e in expenses}, reverse=True)


# ---------------- Tax Summary -----------------
@dataclass
class CategoryTotal:
    total: float = 0.0
    deductible: float = 0.0
    count: int = 0


@dataclass(frozen=True)
class TaxSummary:
    total_expenses: float
    total_deductible: float
    total_reimbursable: float
    total_non_deductible: float
    record_count: int
    by_category: Dict[str, CategoryTotal] = field(default_factory=dict)


def calculate_summary(
    expenses: Iterable["ExpenseOut"], year: Optional[int] = None
) -> TaxSummary:
    """Single-pass reduction of expenses into tax totals.

    Only 'deductible' rows land in by_category. 'reimbursable' rows count
    towards total_reimbursable and nothing else; every other status is
    non-deductible in full.
    """
    rows = filter_by_year(expenses, year)
    total_expenses = 0.0
    total_deductible = 0.0
    total_reimbursable = 0.0
    total_non_deductible = 0.0
    by_category: Dict[str, CategoryTotal] = {}

    for expense in rows:
        amount = float(expense.amount or 0)
        total_expenses += amount
        if expense.status == "reimbursable":
            total_reimbursable += amount
        elif expense.status == "deductible":
            split = calculate_deduction(amount, expense.category, expense.status)
            total_deductible += split.deductible
            total_non_deductible += split.non_deductible
            bucket = by_category.setdefault(expense.category or "other", CategoryTotal())
            bucket.total += amount
            bucket.deductible += split.deductible
            bucket.count += 1
        else:
            total_non_deductible += amount

    return TaxSummary(
        total_expenses=total_expenses,
        total_deductible=total_deductible,
        total_reimbursable=total_reimbursable,
        total_non_deductible=total_non_deductible,
        record_count=len(rows),
        by_category=by_category,
    )


# ---------------- Monthly Totals -----------------
@dataclass(frozen=True)
class MonthlyTotal:
    month: str  # YYYY-MM
    total: float
    count: int


def monthly_totals(expenses: Iterable["ExpenseOut"]) -> List[MonthlyTotal]:
    """Return totals per calendar month in ascending month order."""
    buckets: Dict[str, List[float]] = {}
    for expense in expenses:
        key = expense.date.strftime("%Y-%m")
        buckets.setdefault(key, []).append(float(expense.amount or 0))
    return [
        MonthlyTotal(month=key, total=sum(values), count=len(values))
        for key, values in sorted(buckets.items())
    ]


# ---------------- T2125 -----------------
@dataclass
class T2125LineTotal:
    line: str
    name: str
    name_es: str
    deduction_rate: float
    gross_amount: float = 0.0
    net_deductible: float = 0.0
    expense_count: int = 0
    note: Optional[str] = None
    note_es: Optional[str] = None


def calculate_t2125_totals(expenses: Iterable["ExpenseOut"]) -> List[T2125LineTotal]:
    """Fold deductible expenses into T2125 lines.

    Every line starts at zero; only lines with a positive gross amount are
    returned, sorted by numeric line number.
    """
    totals: "OrderedDict[str, T2125LineTotal]" = OrderedDict(
        (
            number,
            T2125LineTotal(
                line=number,
                name=info.name,
                name_es=info.name_es,
                deduction_rate=info.deduction_rate,
                note=info.note,
                note_es=info.note_es,
            ),
        )
        for number, info in T2125_LINES.items()
    )
    for expense in expenses:
        if expense.status != "deductible":
            continue
        number = t2125_line_for(expense.category)
        bucket = totals.get(number) or totals[DEFAULT_T2125_LINE]
        amount = float(expense.amount or 0)
        bucket.gross_amount += amount
        bucket.net_deductible += amount * bucket.deduction_rate
        bucket.expense_count += 1

    return sorted(
        (t for t in totals.values() if t.gross_amount > 0), key=lambda t: int(t.line)
    )


@dataclass(frozen=True)
class T2125Report:
    year: Optional[int]
    lines: List[T2125LineTotal]
    deductible_expenses: List["ExpenseOut"]
    total_gross: float
    total_deductible: float
    hst_gst_paid: float
    itc_claimable: float

    @property
    def deductible_count(self) -> int:
        return len(self.deductible_expenses)

    def expenses_for_line(self, line: str) -> List["ExpenseOut"]:
        return [
            e for e in self.deductible_expenses if t2125_line_for(e.category) == line
        ]


def _tax_included(amount: float, rate: float) -> float:
    """Portion of a tax-inclusive amount that is the tax itself."""
    return amount - (amount / (1 + rate))


def build_t2125_report(
    expenses: Sequence["ExpenseOut"],
    year: Optional[int] = None,
    hst_rate: float = DEFAULT_HST_RATE,
) -> T2125Report:
    rows = filter_by_year(expenses, year)
    deductible = [e for e in rows if e.status == "deductible"]
    lines = calculate_t2125_totals(rows)
    total_gross = sum(line.gross_amount for line in lines)
    total_deductible = sum(line.net_deductible for line in lines)
    return T2125Report(
        year=year,
        lines=lines,
        deductible_expenses=deductible,
        total_gross=total_gross,
        total_deductible=total_deductible,
        hst_gst_paid=_tax_included(total_gross, hst_rate),
        itc_claimable=_tax_included(total_deductible, hst_rate),
    )


__all__ = [
    "DEFAULT_HST_RATE",
    "filter_by_year",
    "available_years",
    "CategoryTotal",
    "TaxSummary",
    "calculate_summary",
    "MonthlyTotal",
    "monthly_totals",
    "T2125LineTotal",
    "calculate_t2125_totals",
    "T2125Report",
    "build_t2125_report",
]
