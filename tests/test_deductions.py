import logging

import pytest

from evofinz.models.constants import CATEGORIES, STATUSES
from evofinz.services.deductions import calculate_deduction, deduction_rate_for
from evofinz.services.money import format_currency, format_rate, round2
from evofinz.services.tax_rules import get_deduction_rule, t2125_line_for


class TestCalculateDeduction:
    def test_meals_are_half_deductible(self):
        split = calculate_deduction(100.0, "meals", "deductible")
        assert split.deductible == pytest.approx(50.0)
        assert split.non_deductible == pytest.approx(50.0)
        assert split.rate == 0.5

    def test_travel_is_fully_deductible(self):
        split = calculate_deduction(200.0, "travel", "deductible")
        assert split.deductible == pytest.approx(200.0)
        assert split.non_deductible == 0
        assert split.rate == 1.0

    def test_reimbursable_contributes_nothing(self):
        split = calculate_deduction(80.0, "travel", "reimbursable")
        assert (split.deductible, split.non_deductible, split.rate) == (0, 0, 0)

    @pytest.mark.parametrize("status", ["non_deductible", "pending", "rejected", "finalized"])
    def test_other_statuses_are_non_deductible(self, status):
        split = calculate_deduction(40.0, "meals", status)
        assert split.deductible == 0
        assert split.non_deductible == pytest.approx(40.0)
        assert split.rate == 0

    def test_unknown_category_defaults_to_full_rate_and_warns(self, caplog):
        caplog.set_level(logging.WARNING, logger="evofinz.tax")
        split = calculate_deduction(70.0, "crypto_mining", "deductible")
        assert split.deductible == pytest.approx(70.0)
        assert split.rate == 1.0
        assert any("no deduction rule" in r.getMessage() for r in caplog.records)

    def test_missing_category_behaves_like_unmapped(self):
        assert calculate_deduction(10.0, None, "deductible").rate == 1.0

    @pytest.mark.parametrize("category", sorted(CATEGORIES))
    def test_split_sums_to_amount_for_deductible_rows(self, category):
        split = calculate_deduction(123.45, category, "deductible")
        assert split.deductible + split.non_deductible == pytest.approx(123.45)
        assert 0 <= split.deductible <= 123.45

    @pytest.mark.parametrize("status", STATUSES)
    def test_split_never_negative(self, status):
        split = calculate_deduction(19.99, "meals", status)
        assert split.deductible >= 0
        assert split.non_deductible >= 0


def test_rule_lookup():
    assert get_deduction_rule("meals").deduction_rate == 0.5
    assert get_deduction_rule("fuel") is None
    assert get_deduction_rule(None) is None
    assert deduction_rate_for("fuel") == 1.0


def test_t2125_line_mapping():
    assert t2125_line_for("meals") == "8523"
    assert t2125_line_for("travel") == "9200"
    assert t2125_line_for("equipment") == "9281"
    assert t2125_line_for("crypto_mining") == "9270"
    assert t2125_line_for(None) == "9270"


def test_money_helpers():
    assert round2(2.675) == 2.68
    assert format_currency(1234.5) == "$1,234.50"
    assert format_currency(1234567.4, "CL") == "$1.234.567"
    assert format_rate(0.5) == "50%"
