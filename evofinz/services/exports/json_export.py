from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Sequence

from evofinz.services.exports.base import (
    MEDIA_TYPES,
    ExportArtifact,
    ExportOptions,
    dated_filename,
    expense_base_name,
    format_expense_rows,
)
from evofinz.services.money import round2
from evofinz.services.tax_rules import export_category_label
from evofinz.services.tax_summary import calculate_summary

if TYPE_CHECKING:  # pragma: no cover
    from evofinz.models.expense import ExpenseOut

logger = logging.getLogger("evofinz.exports")


def build_json_document(
    expenses: Sequence["ExpenseOut"], options: ExportOptions
) -> dict:
    rows = format_expense_rows(expenses, options.language)
    summary = calculate_summary(expenses)
    return {
        "exportDate": options.generated_at.strftime("%Y-%m-%d %H:%M"),
        "totalRecords": len(rows),
        "summary": {
            "totalExpenses": round2(summary.total_expenses),
            "totalDeductible": round2(summary.total_deductible),
            "totalReimbursable": round2(summary.total_reimbursable),
            "totalNonDeductible": round2(summary.total_non_deductible),
            "byCategory": [
                {
                    "category": export_category_label(category),
                    "total": round2(data.total),
                    "deductible": round2(data.deductible),
                    "count": data.count,
                }
                for category, data in summary.by_category.items()
            ],
        },
        "expenses": rows,
    }


def render_json(expenses: Sequence["ExpenseOut"], options: ExportOptions) -> ExportArtifact:
    document = build_json_document(expenses, options)
    content = json.dumps(document, indent=2, ensure_ascii=False).encode("utf-8")
    logger.info("json export generated", extra={"records": document["totalRecords"]})
    return ExportArtifact(
        filename=dated_filename(expense_base_name(options.year), "json", options),
        media_type=MEDIA_TYPES["json"],
        content=content,
    )
