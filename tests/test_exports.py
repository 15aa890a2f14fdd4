import csv
import datetime as dt
import io
import json

import pytest
from openpyxl import load_workbook

from evofinz.core.errors import NoExpensesError, UnsupportedExportFormat
from evofinz.services.exports import export_expenses, export_reimbursements, export_t2125
from evofinz.services.exports.base import EXPORT_COLUMNS, format_expense_row
from evofinz.services.exports.csv_export import render_csv
from evofinz.services.exports.json_export import render_json
from evofinz.services.exports.pdf_export import render_expenses_pdf
from evofinz.services.exports.xlsx_export import EXPENSES_SHEET, SUMMARY_SHEET, render_xlsx


def _workbook(artifact):
    return load_workbook(io.BytesIO(artifact.content))


class TestRowFormatting:
    def test_deductible_meal_row(self, make_expense):
        row = format_expense_row(make_expense(category="meals", amount=100.0, tags=["team"]))
        assert tuple(row) == EXPORT_COLUMNS
        assert row["Category"] == "Comidas / Meals"
        assert row["Deduction Rate"] == "50%"
        assert row["Deductible Amount"] == 50.0
        assert row["Non-Deductible Amount"] == 50.0
        assert row["Status"] == "Deducible / Deductible"
        assert row["Tags"] == "team"

    def test_reimbursable_row_has_no_rate(self, make_expense):
        row = format_expense_row(make_expense(status="reimbursable", category="fuel"))
        assert row["Deduction Rate"] == "N/A"
        assert row["Category (CRA)"] == "N/A"
        assert row["Category"] == "fuel"
        assert row["Deductible Amount"] == 0
        assert row["Non-Deductible Amount"] == 0


class TestCsv:
    def test_bom_header_and_rows(self, sample_expenses, options):
        artifact = render_csv(sample_expenses, options(format="csv"))
        assert artifact.content.startswith(b"\xef\xbb\xbf")
        assert artifact.filename == "gastos_fiscales_2025-06-01.csv"
        reader = csv.reader(io.StringIO(artifact.content.decode("utf-8-sig")))
        rows = list(reader)
        assert tuple(rows[0]) == EXPORT_COLUMNS
        assert len(rows) == len(sample_expenses) + 1
        meals = rows[1]
        assert meals[EXPORT_COLUMNS.index("Amount")] == "100.00"
        assert meals[EXPORT_COLUMNS.index("Deductible Amount")] == "50.00"

    def test_empty_input_raises(self, options):
        with pytest.raises(NoExpensesError, match="No expenses to export"):
            render_csv([], options(format="csv"))


def test_json_document(sample_expenses, options):
    artifact = render_json(sample_expenses, options(format="json"))
    document = json.loads(artifact.content)
    assert document["totalRecords"] == len(sample_expenses)
    assert document["exportDate"] == "2025-06-01 09:30"
    assert document["summary"]["totalDeductible"] == 600.0
    assert document["summary"]["totalReimbursable"] == 80.0
    categories = {c["category"] for c in document["summary"]["byCategory"]}
    assert "Comidas / Meals" in categories
    assert document["expenses"][0]["Vendor"] == "Tim Hortons"
    assert b'\n  "exportDate"' in artifact.content


class TestXlsx:
    def test_two_sheets(self, sample_expenses, options):
        artifact = render_xlsx(sample_expenses, options())
        wb = _workbook(artifact)
        assert wb.sheetnames == [EXPENSES_SHEET, SUMMARY_SHEET]
        ws = wb[EXPENSES_SHEET]
        assert [c.value for c in ws[1]] == list(EXPORT_COLUMNS)
        assert ws.max_row == len(sample_expenses) + 1
        assert ws.freeze_panes == "A2"
        summary = wb[SUMMARY_SHEET]
        assert summary["A1"].value == "RESUMEN FISCAL / TAX SUMMARY"
        assert summary["B3"].value == "$780.00"

    def test_year_filter_through_dispatcher(self, sample_expenses, options):
        artifact = export_expenses(sample_expenses, options(format="xlsx", year=2024))
        assert artifact.filename == "gastos_fiscales_2024_2025-06-01.xlsx"
        ws = _workbook(artifact)[EXPENSES_SHEET]
        assert ws.max_row == 2


class TestDispatcher:
    def test_unsupported_format(self, sample_expenses, options):
        with pytest.raises(UnsupportedExportFormat):
            export_expenses(sample_expenses, options(format="docx"))

    def test_year_without_rows_raises_localized(self, sample_expenses, options):
        with pytest.raises(NoExpensesError) as excinfo:
            export_expenses(sample_expenses, options(format="csv", year=2019, language="es"))
        assert str(excinfo.value) == "No hay gastos para exportar"

    def test_t2125_rejects_csv(self, sample_expenses, options):
        with pytest.raises(UnsupportedExportFormat):
            export_t2125(sample_expenses, options(format="csv"))


class TestT2125Xlsx:
    def test_three_sheets(self, sample_expenses, options):
        artifact = export_t2125(sample_expenses, options(format="xlsx", year=2025))
        assert artifact.filename == "T2125_Report_2025_2025-06-01.xlsx"
        wb = _workbook(artifact)
        assert wb.sheetnames == ["T2125 Resumen", "Detalle por Línea", "Datos Completos"]
        raw = wb["Datos Completos"]
        assert raw.max_row == 4  # header + three deductible 2025 rows
        lines = {raw.cell(row=r, column=5).value for r in range(2, raw.max_row + 1)}
        assert lines == {"8523", "8810", "9200"}

    def test_no_deductible_rows_raises(self, make_expense, options):
        with pytest.raises(NoExpensesError):
            export_t2125([make_expense(status="pending")], options(format="xlsx"))


class TestReimbursementExports:
    def test_xlsx(self, sample_expenses, options):
        artifact = export_reimbursements(
            sample_expenses,
            options(
                format="xlsx",
                start_date=dt.date(2025, 1, 1),
                end_date=dt.date(2025, 12, 31),
            ),
        )
        assert artifact.filename == "Reimbursements_2025-01-01_2025-12-31.xlsx"
        wb = _workbook(artifact)
        assert wb.sheetnames == ["Resumen por Cliente", "Detalle de Gastos", "Por Categoría"]
        summary = wb["Resumen por Cliente"]
        assert summary["A2"].value == "Acme Corp"
        assert summary["A3"].value == "TOTAL"
        assert summary["C3"].value == 80.0

    def test_pdf(self, sample_expenses, options):
        artifact = export_reimbursements(
            sample_expenses, options(format="pdf", language="es")
        )
        assert artifact.content.startswith(b"%PDF")
        assert artifact.filename == "Reembolsos_2025-06-01.pdf"

    def test_nothing_reimbursable_raises(self, make_expense, options):
        with pytest.raises(NoExpensesError):
            export_reimbursements([make_expense()], options(format="pdf"))


class TestPdf:
    def test_expense_report(self, sample_expenses, options):
        artifact = render_expenses_pdf(
            sample_expenses,
            options(
                format="pdf",
                year=2025,
                language="es",
                is_draft=True,
                user_name="Ana",
                business_name="Ana & Co",
            ),
        )
        assert artifact.content.startswith(b"%PDF")
        assert artifact.media_type == "application/pdf"
        assert artifact.filename == "gastos_2025_2025-06-01.pdf"

    def test_expense_report_many_rows_paginates(self, make_expense, options):
        rows = [
            make_expense(amount=float(i), date=dt.date(2025, 1 + i % 12, 1))
            for i in range(1, 120)
        ]
        artifact = render_expenses_pdf(rows, options(format="pdf", group_by="month"))
        assert artifact.content.startswith(b"%PDF")
        assert artifact.filename == "expenses_2025-06-01.pdf"

    def test_t2125_report(self, sample_expenses, options):
        artifact = export_t2125(sample_expenses, options(format="pdf"))
        assert artifact.content.startswith(b"%PDF")
        assert artifact.filename == "T2125_Report_All_2025-06-01.pdf"

    def test_empty_raises(self, options):
        with pytest.raises(NoExpensesError):
            render_expenses_pdf([], options(format="pdf"))


@pytest.mark.parametrize("fmt", ["csv", "json", "xlsx", "pdf"])
def test_every_expense_format_rejects_empty_input(fmt, options):
    with pytest.raises(NoExpensesError, match="No expenses to export"):
        export_expenses([], options(format=fmt))


@pytest.mark.parametrize("fmt", ["xlsx", "pdf"])
def test_report_exports_reject_empty_input(fmt, options):
    with pytest.raises(NoExpensesError):
        export_t2125([], options(format=fmt))
    with pytest.raises(NoExpensesError):
        export_reimbursements([], options(format=fmt))


def test_json_renderer_rejects_empty_input(options):
    with pytest.raises(NoExpensesError):
        render_json([], options(format="json"))


class TestControlCharacters:
    def test_expense_workbook_strips_illegal_characters(self, make_expense, options):
        rows = [make_expense(vendor="ACME\x0bStore", notes="line\x0cbreak")]
        ws = _workbook(export_expenses(rows, options(format="xlsx")))[EXPENSES_SHEET]
        assert ws.cell(row=2, column=EXPORT_COLUMNS.index("Vendor") + 1).value == "ACMEStore"
        assert ws.cell(row=2, column=EXPORT_COLUMNS.index("Notes") + 1).value == "linebreak"

    def test_report_workbooks_strip_illegal_characters(self, make_expense, options):
        rows = [
            make_expense(category="meals", description="Lunch\x0c"),
            make_expense(
                status="reimbursable",
                vendor="Taxi\x0b",
                client_id=3,
                client_name="Bad\x0cClient",
            ),
        ]
        t2125 = _workbook(export_t2125(rows, options(format="xlsx")))
        assert t2125["Datos Completos"]["C2"].value == "Lunch"
        reimb = _workbook(export_reimbursements(rows, options(format="xlsx")))
        assert reimb["Resumen por Cliente"]["A2"].value == "BadClient"
