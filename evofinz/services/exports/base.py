"""Shared pieces for every exporter: options, artifact and row formatting."""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Sequence

from evofinz.core.errors import NoExpensesError
from evofinz.models.constants import DEFAULT_CURRENCY
from evofinz.services.deductions import calculate_deduction
from evofinz.services.money import round2
from evofinz.services.tax_rules import (
    export_category_label,
    export_status_label,
    get_deduction_rule,
)

if TYPE_CHECKING:  # pragma: no cover
    from evofinz.models.expense import ExpenseOut

MEDIA_TYPES = {
    "csv": "text/csv; charset=utf-8",
    "json": "application/json; charset=utf-8",
    "xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    "pdf": "application/pdf",
}

EXPORT_COLUMNS = (
    "Date",
    "Vendor",
    "Description",
    "Category",
    "Category (CRA)",
    "Amount",
    "Currency",
    "Status",
    "Client",
    "Deduction Rate",
    "Deductible Amount",
    "Non-Deductible Amount",
    "Tags",
    "Notes",
)


@dataclass(frozen=True)
class ExportArtifact:
    filename: str
    media_type: str
    content: bytes


@dataclass
class ExportOptions:
    format: str = "xlsx"
    year: Optional[int] = None
    language: str = "en"
    title: Optional[str] = None
    subtitle: Optional[str] = None
    group_by: str = "none"  # none | month; only the PDF report reads it
    is_draft: bool = False
    user_name: Optional[str] = None
    business_name: Optional[str] = None
    country: Optional[str] = None
    hst_rate: float = 0.13
    start_date: Optional[dt.date] = None
    end_date: Optional[dt.date] = None
    generated_at: dt.datetime = field(default_factory=dt.datetime.now)

    @property
    def stamp(self) -> str:
        return self.generated_at.strftime("%Y-%m-%d")


def require_expenses(expenses: Sequence[Any], language: str = "en") -> None:
    if not expenses:
        raise NoExpensesError(language)


def dated_filename(base: str, extension: str, options: ExportOptions) -> str:
    return f"{base}_{options.stamp}.{extension}"


def expense_base_name(year: Optional[int]) -> str:
    return f"gastos_fiscales_{year}" if year else "gastos_fiscales"


def format_expense_row(expense: "ExpenseOut") -> Dict[str, Any]:
    """Flatten one expense into the fourteen export columns."""
    amount = float(expense.amount or 0)
    split = calculate_deduction(amount, expense.category, expense.status)
    rule = get_deduction_rule(expense.category)
    return {
        "Date": expense.date.isoformat(),
        "Vendor": expense.vendor or "",
        "Description": expense.description or "",
        "Category": export_category_label(expense.category),
        "Category (CRA)": rule.description if rule else "N/A",
        "Amount": round2(amount),
        "Currency": expense.currency or DEFAULT_CURRENCY,
        "Status": export_status_label(expense.status),
        "Client": expense.client_name or "",
        "Deduction Rate": f"{split.rate * 100:.0f}%" if split.rate > 0 else "N/A",
        "Deductible Amount": round2(split.deductible),
        "Non-Deductible Amount": round2(split.non_deductible),
        "Tags": ", ".join(expense.tags or []),
        "Notes": expense.notes or "",
    }


def format_expense_rows(
    expenses: Sequence["ExpenseOut"], language: str = "en"
) -> List[Dict[str, Any]]:
    require_expenses(expenses, language)
    return [format_expense_row(e) for e in expenses]


__all__ = [
    "MEDIA_TYPES",
    "EXPORT_COLUMNS",
    "ExportArtifact",
    "ExportOptions",
    "require_expenses",
    "dated_filename",
    "expense_base_name",
    "format_expense_row",
    "format_expense_rows",
]
