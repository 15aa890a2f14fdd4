"""Excel workbook exporters built on openpyxl.

Sheet names cannot contain '/', so the bilingual titles use ' - '.
"""

from __future__ import annotations

import io
import logging
from typing import TYPE_CHECKING, Any, Iterable, Sequence

from openpyxl import Workbook
from openpyxl.cell.cell import ILLEGAL_CHARACTERS_RE
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.worksheet import Worksheet

from evofinz.services.exports.base import (
    EXPORT_COLUMNS,
    MEDIA_TYPES,
    ExportArtifact,
    ExportOptions,
    dated_filename,
    expense_base_name,
    format_expense_rows,
)
from evofinz.services.money import format_rate
from evofinz.services.tax_rules import TAX_DEDUCTION_RULES, export_category_label
from evofinz.services.tax_summary import calculate_summary

if TYPE_CHECKING:  # pragma: no cover
    from evofinz.models.expense import ExpenseOut

logger = logging.getLogger("evofinz.exports")

EXPENSES_SHEET = "Gastos - Expenses"
SUMMARY_SHEET = "Resumen Fiscal - Tax Summary"

_EXPENSE_WIDTHS = (12, 25, 30, 25, 40, 12, 8, 20, 20, 15, 18, 20, 25, 30)
_SUMMARY_WIDTHS = (45, 20, 50, 15)
_MONEY_FORMAT = '"$"#,##0.00'

DISCLAIMER_ES = (
    "NOTA: Este reporte es para referencia. Consulte con un contador para su "
    "declaración de impuestos oficial."
)
DISCLAIMER_EN = (
    "NOTE: This report is for reference. Consult with an accountant for your "
    "official tax filing."
)


def set_column_widths(ws: Worksheet, widths: Iterable[int]) -> None:
    for idx, width in enumerate(widths, start=1):
        ws.column_dimensions[get_column_letter(idx)].width = width


def cell_value(value: Any) -> Any:
    """Drop control characters that openpyxl refuses to store in a cell."""
    if isinstance(value, str):
        return ILLEGAL_CHARACTERS_RE.sub("", value)
    return value


def append_rows(ws: Worksheet, rows: Iterable[Sequence[Any]]) -> None:
    for row in rows:
        ws.append([cell_value(v) for v in row])


def workbook_bytes(wb: Workbook) -> bytes:
    buffer = io.BytesIO()
    wb.save(buffer)
    return buffer.getvalue()


def _money(value: float) -> str:
    return f"${value:.2f}"


def _write_expense_sheet(ws: Worksheet, rows: Sequence[dict]) -> None:
    ws.append(list(EXPORT_COLUMNS))
    for cell in ws[1]:
        cell.font = Font(bold=True)
    for row in rows:
        ws.append([cell_value(row[col]) for col in EXPORT_COLUMNS])
    for col in ("F", "K", "L"):
        for cell in ws[col][1:]:
            cell.number_format = _MONEY_FORMAT
    set_column_widths(ws, _EXPENSE_WIDTHS)
    ws.freeze_panes = "A2"


def _summary_rows(expenses: Sequence["ExpenseOut"], options: ExportOptions) -> list:
    summary = calculate_summary(expenses)
    rows: list = [
        ["RESUMEN FISCAL / TAX SUMMARY", ""],
        ["", ""],
        ["Total de Gastos / Total Expenses", _money(summary.total_expenses)],
        ["Total Deducible / Total Deductible", _money(summary.total_deductible)],
        ["Total Reembolsable / Total Reimbursable", _money(summary.total_reimbursable)],
        [
            "Total No Deducible / Total Non-Deductible",
            _money(summary.total_non_deductible),
        ],
        ["", ""],
        ["DESGLOSE POR CATEGORÍA / BREAKDOWN BY CATEGORY", "", ""],
        ["Categoría", "Total", "Deducible", "Cantidad"],
    ]
    for category, data in summary.by_category.items():
        rows.append(
            [
                export_category_label(category),
                _money(data.total),
                _money(data.deductible),
                str(data.count),
            ]
        )
    rows += [["", ""], ["INFORMACIÓN CRA / CRA INFORMATION", ""], ["", ""]]
    for rule in TAX_DEDUCTION_RULES:
        rows.append(
            [
                export_category_label(rule.category),
                format_rate(rule.deduction_rate),
                rule.description,
            ]
        )
    rows += [
        ["", ""],
        [
            "Fecha de Exportación / Export Date",
            options.generated_at.strftime("%Y-%m-%d %H:%M"),
        ],
        ["", ""],
        [DISCLAIMER_ES],
        [DISCLAIMER_EN],
    ]
    return rows


def render_xlsx(expenses: Sequence["ExpenseOut"], options: ExportOptions) -> ExportArtifact:
    """Two sheets: every expense row, then the tax summary with CRA rules."""
    rows = format_expense_rows(expenses, options.language)

    wb = Workbook()
    ws = wb.active
    ws.title = EXPENSES_SHEET
    _write_expense_sheet(ws, rows)

    summary_ws = wb.create_sheet(SUMMARY_SHEET)
    append_rows(summary_ws, _summary_rows(expenses, options))
    summary_ws["A1"].font = Font(bold=True, size=12)
    set_column_widths(summary_ws, _SUMMARY_WIDTHS)

    logger.info("xlsx export generated", extra={"records": len(rows)})
    return ExportArtifact(
        filename=dated_filename(expense_base_name(options.year), "xlsx", options),
        media_type=MEDIA_TYPES["xlsx"],
        content=workbook_bytes(wb),
    )
