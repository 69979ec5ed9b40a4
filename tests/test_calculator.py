"""
tests/test_calculator.py
~~~~~~~~~~~~~~~~~~~~~~~~
Tests for creditmemo.calculator: subtotal/tax split and credit type.
"""

from __future__ import annotations

from decimal import Decimal

import pytest

from creditmemo.calculator import (
    CREDIT_TYPE_FULL,
    CREDIT_TYPE_PARTIAL,
    TAX_RATE,
    FinancialBreakdown,
    calculate_subtotal,
    calculate_tax_amount,
    determine_credit_type,
    round_money,
    split_credit_amount,
)


class TestTaxRate:
    def test_fixed_rate_is_twenty_percent(self):
        assert TAX_RATE == Decimal("0.20")


class TestSubtotal:
    def test_500_credit(self):
        assert calculate_subtotal(Decimal("500.00")) == Decimal("416.67")

    def test_3600_credit(self):
        assert calculate_subtotal(Decimal("3600.00")) == Decimal("3000.00")

    def test_round_half_up(self):
        # 0.03 / 1.2 = 0.025 exactly, half-up gives 0.03 (banker's would give 0.02)
        assert calculate_subtotal(Decimal("0.03")) == Decimal("0.03")

    def test_two_decimal_places(self):
        assert calculate_subtotal(Decimal("100")).as_tuple().exponent == -2

    def test_custom_rate(self):
        assert calculate_subtotal(Decimal("119.00"), Decimal("0.19")) == Decimal("100.00")


class TestTaxAmount:
    def test_500_credit(self):
        assert calculate_tax_amount(Decimal("500.00")) == Decimal("83.33")

    def test_3600_credit(self):
        assert calculate_tax_amount(Decimal("3600.00")) == Decimal("600.00")

    @pytest.mark.parametrize("amount", ["0.01", "1.00", "99.99", "500.00", "1234.56", "999999.99"])
    def test_subtotal_plus_tax_equals_credit(self, amount):
        a = Decimal(amount)
        assert calculate_subtotal(a) + calculate_tax_amount(a) == a

    @pytest.mark.parametrize("amount", ["0.07", "12.34", "777.77", "10000.01"])
    def test_subtotal_matches_definition(self, amount):
        a = Decimal(amount)
        assert calculate_subtotal(a) == round_money(a / Decimal("1.20"))


class TestSplitCreditAmount:
    def test_returns_breakdown(self):
        b = split_credit_amount(Decimal("500.00"))
        assert isinstance(b, FinancialBreakdown)
        assert b.subtotal == Decimal("416.67")
        assert b.tax_amount == Decimal("83.33")
        assert b.total == Decimal("500.00")

    def test_tax_percentage(self):
        assert split_credit_amount(Decimal("10")).tax_percentage == Decimal("20")

    def test_breakdown_is_frozen(self):
        b = split_credit_amount(Decimal("10"))
        with pytest.raises(Exception):
            b.subtotal = Decimal("0")  # type: ignore[misc]


class TestCreditType:
    def test_partial(self):
        assert determine_credit_type(Decimal("500.00"), Decimal("5000.00")) == CREDIT_TYPE_PARTIAL

    def test_partial_3600_of_12000(self):
        assert determine_credit_type(Decimal("3600.00"), Decimal("12000.00")) == "PARTIAL"

    def test_equal_amounts_are_full(self):
        assert determine_credit_type(Decimal("1000.00"), Decimal("1000.00")) == CREDIT_TYPE_FULL

    def test_equal_with_different_scale(self):
        assert determine_credit_type(Decimal("1000"), Decimal("1000.00")) == "FULL"

    def test_over_credit_is_full(self):
        assert determine_credit_type(Decimal("1200.00"), Decimal("1000.00")) == "FULL"

    def test_one_cent_short_is_partial(self):
        assert determine_credit_type(Decimal("999.99"), Decimal("1000.00")) == "PARTIAL"
