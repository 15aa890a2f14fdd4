"""Export entry points.

Each dispatcher picks a renderer by ``options.format`` and returns an
``ExportArtifact``; renderers raise ``NoExpensesError`` on empty input.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Sequence

from evofinz.core.errors import UnsupportedExportFormat
from evofinz.models.constants import EXPORT_FORMATS, REPORT_FORMATS
from evofinz.services.exports.base import ExportArtifact, ExportOptions
from evofinz.services.exports.csv_export import render_csv
from evofinz.services.exports.json_export import render_json
from evofinz.services.exports.pdf_export import (
    render_expenses_pdf,
    render_reimbursement_pdf,
    render_t2125_pdf,
)
from evofinz.services.exports.reimbursement_export import render_reimbursement_xlsx
from evofinz.services.exports.t2125_export import render_t2125_xlsx
from evofinz.services.exports.xlsx_export import render_xlsx
from evofinz.services.reimbursements import group_reimbursements
from evofinz.services.tax_summary import filter_by_year

if TYPE_CHECKING:  # pragma: no cover
    from evofinz.models.expense import ExpenseOut

_EXPENSE_RENDERERS = {
    "csv": render_csv,
    "json": render_json,
    "xlsx": render_xlsx,
    "pdf": render_expenses_pdf,
}


def export_expenses(
    expenses: Sequence["ExpenseOut"], options: ExportOptions
) -> ExportArtifact:
    renderer = _EXPENSE_RENDERERS.get(options.format)
    if renderer is None:
        raise UnsupportedExportFormat(options.format, EXPORT_FORMATS)
    return renderer(filter_by_year(expenses, options.year), options)


def export_t2125(
    expenses: Sequence["ExpenseOut"], options: ExportOptions
) -> ExportArtifact:
    if options.format == "xlsx":
        return render_t2125_xlsx(expenses, options)
    if options.format == "pdf":
        return render_t2125_pdf(expenses, options)
    raise UnsupportedExportFormat(options.format, REPORT_FORMATS)


def export_reimbursements(
    expenses: Sequence["ExpenseOut"], options: ExportOptions
) -> ExportArtifact:
    if options.format not in REPORT_FORMATS:
        raise UnsupportedExportFormat(options.format, REPORT_FORMATS)
    report = group_reimbursements(
        expenses, options.start_date, options.end_date, options.language
    )
    if options.format == "xlsx":
        return render_reimbursement_xlsx(report, options)
    return render_reimbursement_pdf(report, options)


__all__ = [
    "ExportArtifact",
    "ExportOptions",
    "export_expenses",
    "export_t2125",
    "export_reimbursements",
]
