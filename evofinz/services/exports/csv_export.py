from __future__ import annotations

import csv
import io
import logging
from typing import TYPE_CHECKING, Sequence

from evofinz.services.exports.base import (
    EXPORT_COLUMNS,
    MEDIA_TYPES,
    ExportArtifact,
    ExportOptions,
    dated_filename,
    expense_base_name,
    format_expense_rows,
)

if TYPE_CHECKING:  # pragma: no cover
    from evofinz.models.expense import ExpenseOut

logger = logging.getLogger("evofinz.exports")

_NUMERIC_COLUMNS = {"Amount", "Deductible Amount", "Non-Deductible Amount"}


def render_csv(expenses: Sequence["ExpenseOut"], options: ExportOptions) -> ExportArtifact:
    """One row per expense, UTF-8 with BOM so spreadsheet apps pick the encoding."""
    rows = format_expense_rows(expenses, options.language)
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(EXPORT_COLUMNS)
    for row in rows:
        writer.writerow(
            f"{row[col]:.2f}" if col in _NUMERIC_COLUMNS else row[col]
            for col in EXPORT_COLUMNS
        )
    content = buffer.getvalue().encode("utf-8-sig")
    logger.info("csv export generated", extra={"records": len(rows)})
    return ExportArtifact(
        filename=dated_filename(expense_base_name(options.year), "csv", options),
        media_type=MEDIA_TYPES["csv"],
        content=content,
    )
