from __future__ import annotations

import logging

from openpyxl import Workbook
from openpyxl.styles import Font

from evofinz.services.exports.base import (
    MEDIA_TYPES,
    ExportArtifact,
    ExportOptions,
    dated_filename,
    require_expenses,
)
from evofinz.services.exports.xlsx_export import (
    append_rows,
    set_column_widths,
    workbook_bytes,
)
from evofinz.services.reimbursements import ReimbursementReport
from evofinz.services.tax_rules import category_label

logger = logging.getLogger("evofinz.exports")

CLIENT_SHEET = "Resumen por Cliente"
DETAIL_SHEET = "Detalle de Gastos"
CATEGORY_SHEET = "Por Categoría"

_MONEY_FORMAT = '"$"#,##0.00'


def reimbursement_filename(
    report: ReimbursementReport, extension: str, options: ExportOptions
) -> str:
    base = "Reembolsos" if options.language == "es" else "Reimbursements"
    if report.start_date and report.end_date:
        return (
            f"{base}_{report.start_date.isoformat()}_{report.end_date.isoformat()}"
            f".{extension}"
        )
    return dated_filename(base, extension, options)


def _bold_header(ws) -> None:
    for cell in ws[1]:
        cell.font = Font(bold=True)


def _money_column(ws, column: str) -> None:
    for cell in ws[column][1:]:
        cell.number_format = _MONEY_FORMAT


def render_reimbursement_xlsx(
    report: ReimbursementReport, options: ExportOptions
) -> ExportArtifact:
    """Per-client totals, every reimbursable row, and per-client categories."""
    lang = options.language
    require_expenses(report.expenses, lang)

    wb = Workbook()
    ws = wb.active
    ws.title = CLIENT_SHEET
    rows: list = [["Cliente", "Total Gastos", "Monto Total", "Promedio por Gasto"]]
    for group in report.groups:
        rows.append(
            [
                group.client_name,
                group.count,
                round(group.total, 2),
                round(group.total / group.count, 2),
            ]
        )
    rows.append(
        [
            "TOTAL",
            report.expense_count,
            round(report.total_reimbursable, 2),
            round(report.average_per_expense, 2),
        ]
    )
    append_rows(ws, rows)
    _bold_header(ws)
    for cell in ws[ws.max_row]:
        cell.font = Font(bold=True)
    _money_column(ws, "C")
    _money_column(ws, "D")
    set_column_widths(ws, (30, 14, 16, 20))

    detail_ws = wb.create_sheet(DETAIL_SHEET)
    detail: list = [
        [
            "Cliente",
            "Fecha",
            "Vendedor",
            "Categoría",
            "Descripción",
            "Monto",
            "Estado",
            "Notas",
        ]
    ]
    for group in report.groups:
        for expense in group.expenses:
            detail.append(
                [
                    group.client_name,
                    expense.date.isoformat(),
                    expense.vendor or "",
                    category_label(expense.category or "other", lang),
                    expense.description or "",
                    float(expense.amount),
                    expense.status or "pending",
                    expense.notes or "",
                ]
            )
    append_rows(detail_ws, detail)
    _bold_header(detail_ws)
    _money_column(detail_ws, "F")
    set_column_widths(detail_ws, (25, 12, 25, 25, 35, 12, 14, 30))
    detail_ws.freeze_panes = "A2"

    category_ws = wb.create_sheet(CATEGORY_SHEET)
    by_category: list = [["Cliente", "Categoría", "Cantidad de Gastos", "Monto Total"]]
    for group in report.groups:
        for category, data in group.categories.items():
            by_category.append(
                [
                    group.client_name,
                    category_label(category, lang),
                    data.count,
                    round(data.total, 2),
                ]
            )
    append_rows(category_ws, by_category)
    _bold_header(category_ws)
    _money_column(category_ws, "D")
    set_column_widths(category_ws, (25, 25, 18, 16))

    logger.info(
        "reimbursement xlsx export generated",
        extra={"records": report.expense_count, "clients": len(report.groups)},
    )
    return ExportArtifact(
        filename=reimbursement_filename(report, "xlsx", options),
        media_type=MEDIA_TYPES["xlsx"],
        content=workbook_bytes(wb),
    )
