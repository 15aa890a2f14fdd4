import datetime as dt

import pytest

from evofinz.services.reimbursements import group_reimbursements
from evofinz.services.tax_summary import (
    available_years,
    build_t2125_report,
    calculate_summary,
    calculate_t2125_totals,
    filter_by_year,
    monthly_totals,
)


class TestSummary:
    def test_year_totals(self, sample_expenses):
        summary = calculate_summary(sample_expenses, year=2025)
        assert summary.record_count == 6
        assert summary.total_expenses == pytest.approx(480.0)
        assert summary.total_deductible == pytest.approx(300.0)
        assert summary.total_reimbursable == pytest.approx(80.0)
        assert summary.total_non_deductible == pytest.approx(100.0)

    def test_totals_partition_the_expense_total(self, sample_expenses):
        summary = calculate_summary(sample_expenses)
        assert summary.total_expenses == pytest.approx(
            summary.total_deductible
            + summary.total_reimbursable
            + summary.total_non_deductible
        )

    def test_by_category_only_counts_deductible_rows(self, sample_expenses):
        summary = calculate_summary(sample_expenses, year=2025)
        assert set(summary.by_category) == {"meals", "travel", "software"}
        meals = summary.by_category["meals"]
        assert (meals.total, meals.deductible, meals.count) == (100.0, 50.0, 1)

    def test_deductible_total_matches_category_buckets(self, sample_expenses):
        summary = calculate_summary(sample_expenses)
        buckets = summary.by_category.values()
        assert summary.total_deductible == pytest.approx(sum(b.deductible for b in buckets))
        deductible_amount = sum(e.amount for e in sample_expenses if e.status == "deductible")
        assert sum(b.total for b in buckets) == pytest.approx(deductible_amount)

    def test_empty_input(self):
        summary = calculate_summary([])
        assert summary.record_count == 0
        assert summary.total_expenses == 0
        assert summary.by_category == {}


def test_filter_and_available_years(sample_expenses):
    assert len(filter_by_year(sample_expenses, 2024)) == 1
    assert len(filter_by_year(sample_expenses, None)) == len(sample_expenses)
    assert available_years(sample_expenses) == [2025, 2024]


def test_monthly_totals_sorted_ascending(sample_expenses):
    months = monthly_totals(filter_by_year(sample_expenses, 2025))
    assert [m.month for m in months] == ["2025-03", "2025-04"]
    assert months[0].total == pytest.approx(280.0)
    assert months[0].count == 5


class TestT2125:
    def test_lines_are_sorted_and_positive(self, sample_expenses):
        lines = calculate_t2125_totals(filter_by_year(sample_expenses, 2025))
        assert [ln.line for ln in lines] == ["8523", "8810", "9200"]
        meals = lines[0]
        assert meals.gross_amount == pytest.approx(100.0)
        assert meals.net_deductible == pytest.approx(50.0)
        assert meals.expense_count == 1
        assert all(ln.gross_amount > 0 for ln in lines)

    def test_unmapped_category_lands_on_other_expenses(self, make_expense):
        lines = calculate_t2125_totals([make_expense(category="crypto_mining", amount=15)])
        assert [ln.line for ln in lines] == ["9270"]

    def test_report_hst_and_itc(self, sample_expenses):
        report = build_t2125_report(sample_expenses, year=2025, hst_rate=0.13)
        assert report.total_gross == pytest.approx(350.0)
        assert report.total_deductible == pytest.approx(300.0)
        assert report.deductible_count == 3
        assert report.hst_gst_paid == pytest.approx(350 - 350 / 1.13)
        assert report.itc_claimable == pytest.approx(300 - 300 / 1.13)
        assert len(report.expenses_for_line("9200")) == 1

    def test_non_deductible_rows_are_ignored(self, make_expense):
        report = build_t2125_report(
            [make_expense(status="reimbursable"), make_expense(status="pending")]
        )
        assert report.lines == []
        assert report.total_gross == 0


class TestReimbursements:
    def test_groups_by_client_sorted_by_total(self, make_expense):
        rows = [
            make_expense(status="reimbursable", amount=30, client_id=1, client_name="Small Co"),
            make_expense(status="reimbursable", amount=90, client_id=2, client_name="Big Co"),
            make_expense(status="reimbursable", amount=20, client_id=2, client_name="Big Co"),
            make_expense(status="reimbursable", amount=5, category="meals"),
            make_expense(status="deductible", amount=999, client_id=2, client_name="Big Co"),
        ]
        report = group_reimbursements(rows, language="es")
        assert [g.client_name for g in report.groups] == ["Big Co", "Small Co", "Sin cliente"]
        assert report.groups[0].total == pytest.approx(110.0)
        assert report.groups[0].count == 2
        assert report.total_reimbursable == pytest.approx(145.0)
        assert report.expense_count == 4
        assert report.category_totals["meals"] == pytest.approx(5.0)
        assert report.share_of_total(report.groups[0].total) == pytest.approx(110 / 145 * 100)

    def test_date_range_is_inclusive(self, make_expense):
        rows = [
            make_expense(status="reimbursable", date=dt.date(2025, 1, 1)),
            make_expense(status="reimbursable", date=dt.date(2025, 1, 31)),
            make_expense(status="reimbursable", date=dt.date(2025, 2, 1)),
        ]
        report = group_reimbursements(
            rows, start_date=dt.date(2025, 1, 1), end_date=dt.date(2025, 1, 31)
        )
        assert report.expense_count == 2
        assert report.groups[0].client_name == "No client"

    def test_empty_report_has_zero_average(self):
        report = group_reimbursements([])
        assert report.average_per_expense == 0.0
        assert report.share_of_total(10) == 0.0
