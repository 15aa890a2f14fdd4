from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Sequence

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
from evofinz.services.money import format_rate
from evofinz.services.tax_rules import T2125_FORM_URL, t2125_line_for
from evofinz.services.tax_summary import T2125Report, build_t2125_report

if TYPE_CHECKING:  # pragma: no cover
    from evofinz.models.expense import ExpenseOut

logger = logging.getLogger("evofinz.exports")

SUMMARY_SHEET = "T2125 Resumen"
DETAIL_SHEET = "Detalle por Línea"
RAW_SHEET = "Datos Completos"

RULE = "═" * 75
THIN_RULE = "─" * 75

NOTES = (
    (
        '1. Los montos en "Monto Deducible" ya tienen aplicadas las tasas de deducción CRA',
        '   Amounts in "Deductible Amount" already have CRA deduction rates applied',
    ),
    (
        "2. Comidas y entretenimiento (Línea 8523) solo son 50% deducibles",
        "   Meals and entertainment (Line 8523) are only 50% deductible",
    ),
    (
        "3. CCA (Línea 9281) requiere cálculo separado según la clase del activo",
        "   CCA (Line 9281) requires separate calculation based on asset class",
    ),
    (
        "4. Este reporte es solo para referencia. Consulte con un contador profesional.",
        "   This report is for reference only. Consult a professional accountant.",
    ),
)

RAW_COLUMNS = (
    "Fecha / Date",
    "Proveedor / Vendor",
    "Descripción / Description",
    "Categoría / Category",
    "Línea T2125",
    "Monto / Amount",
    "Cliente / Client",
    "Notas / Notes",
)


def t2125_filename(year: int | None, extension: str, options: ExportOptions) -> str:
    return dated_filename(f"T2125_Report_{year or 'All'}", extension, options)


def _summary_rows(report: T2125Report, options: ExportOptions) -> list:
    rows: list = [
        ["FORMULARIO T2125 - RESUMEN DE GASTOS DE NEGOCIO"],
        ["T2125 FORM - STATEMENT OF BUSINESS EXPENSES"],
        [""],
        [f"Año Fiscal / Tax Year: {report.year or 'Todos / All'}"],
        [
            "Fecha de Generación / Generated: "
            + options.generated_at.strftime("%Y-%m-%d %H:%M")
        ],
        [""],
        [RULE],
        ["PARTE 5 - GASTOS DE NEGOCIO / PART 5 - BUSINESS EXPENSES"],
        [RULE],
        [""],
        [
            "Línea",
            "Descripción (ES)",
            "Description (EN)",
            "Monto Bruto",
            "Tasa",
            "Monto Deducible",
            "Cantidad",
        ],
        ["Line", "", "", "Gross Amount", "Rate", "Deductible Amount", "Count"],
    ]
    for line in report.lines:
        rows.append(
            [
                line.line,
                line.name_es,
                line.name,
                f"${line.gross_amount:.2f}",
                format_rate(line.deduction_rate),
                f"${line.net_deductible:.2f}",
                str(line.expense_count),
            ]
        )
        if line.note:
            rows.append(["", f"  ⚠️ {line.note_es}", f"  ⚠️ {line.note}", "", "", "", ""])
    rows += [
        [""],
        [THIN_RULE],
        [
            "TOTAL",
            "Total de Gastos de Negocio",
            "Total Business Expenses",
            f"${report.total_gross:.2f}",
            "",
            f"${report.total_deductible:.2f}",
            str(report.deductible_count),
        ],
        [""],
        [RULE],
        ["NOTAS IMPORTANTES / IMPORTANT NOTES"],
        [RULE],
        [""],
    ]
    for es_note, en_note in NOTES:
        rows += [[es_note], [en_note], [""]]
    rows.append([f"Referencia / Reference: {T2125_FORM_URL}"])
    return rows


def _detail_rows(report: T2125Report) -> list:
    rows: list = [
        ["DETALLE DE GASTOS POR LÍNEA T2125 / EXPENSE DETAILS BY T2125 LINE"],
        [""],
    ]
    for line in report.lines:
        rows.append([""])
        rows.append([f"═══ LÍNEA {line.line}: {line.name_es} / {line.name} ═══"])
        rows.append(["Fecha", "Proveedor", "Descripción", "Monto", "Cliente"])
        for expense in report.expenses_for_line(line.line):
            rows.append(
                [
                    expense.date.isoformat(),
                    expense.vendor or "",
                    expense.description or "",
                    f"${float(expense.amount):.2f}",
                    expense.client_name or "",
                ]
            )
        rows.append(["", "", "Subtotal:", f"${line.gross_amount:.2f}", ""])
    return rows


def _raw_rows(report: T2125Report) -> list:
    rows: list = [list(RAW_COLUMNS)]
    for expense in report.deductible_expenses:
        rows.append(
            [
                expense.date.isoformat(),
                expense.vendor or "",
                expense.description or "",
                expense.category or "",
                t2125_line_for(expense.category),
                float(expense.amount),
                expense.client_name or "",
                expense.notes or "",
            ]
        )
    return rows


def render_t2125_xlsx(
    expenses: Sequence["ExpenseOut"], options: ExportOptions
) -> ExportArtifact:
    """Three sheets: per-line summary, per-line detail, raw deductible rows."""
    report = build_t2125_report(expenses, year=options.year, hst_rate=options.hst_rate)
    require_expenses(report.deductible_expenses, options.language)

    wb = Workbook()
    ws = wb.active
    ws.title = SUMMARY_SHEET
    append_rows(ws, _summary_rows(report, options))
    for coord in ("A1", "A2"):
        ws[coord].font = Font(bold=True, size=12)
    set_column_widths(ws, (8, 40, 40, 15, 8, 18, 10))

    detail_ws = wb.create_sheet(DETAIL_SHEET)
    append_rows(detail_ws, _detail_rows(report))
    set_column_widths(detail_ws, (12, 25, 35, 15, 20))

    raw_ws = wb.create_sheet(RAW_SHEET)
    append_rows(raw_ws, _raw_rows(report))
    for cell in raw_ws[1]:
        cell.font = Font(bold=True)
    set_column_widths(raw_ws, (12, 25, 35, 20, 12, 12, 20, 30))

    logger.info(
        "t2125 xlsx export generated",
        extra={"year": options.year, "lines": len(report.lines)},
    )
    return ExportArtifact(
        filename=t2125_filename(options.year, "xlsx", options),
        media_type=MEDIA_TYPES["xlsx"],
        content=workbook_bytes(wb),
    )
