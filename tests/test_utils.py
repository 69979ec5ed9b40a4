"""
tests/test_utils.py
~~~~~~~~~~~~~~~~~~~
Tests for creditmemo.utils: JSON cleanup and lenient value coercion.
"""

from __future__ import annotations

import json
from datetime import date, datetime
from decimal import Decimal

import pytest

from creditmemo.utils import (
    clean_json_response,
    format_amount,
    parse_date,
    parse_decimal,
    parse_int,
    parse_str,
)


class TestCleanJsonResponse:
    def test_plain_object(self):
        assert json.loads(clean_json_response('{"a": 1}')) == {"a": 1}

    def test_strips_json_fence(self):
        raw = '```json\n{"a": 1}\n```'
        assert json.loads(clean_json_response(raw)) == {"a": 1}

    def test_strips_bare_fence(self):
        raw = '```\n{"a": 1}\n```'
        assert json.loads(clean_json_response(raw)) == {"a": 1}

    def test_surrounding_prose(self):
        raw = 'Sure! Here it is:\n{"a": {"b": 2}}\nLet me know.'
        assert json.loads(clean_json_response(raw)) == {"a": {"b": 2}}

    def test_trailing_commas_removed(self):
        raw = '{"items": [1, 2,], "x": 3,}'
        assert json.loads(clean_json_response(raw)) == {"items": [1, 2], "x": 3}

    def test_commas_in_strings_untouched_when_valid(self):
        raw = '{"text": "a, }"}'
        assert json.loads(clean_json_response(raw)) == {"text": "a, }"}

    @pytest.mark.parametrize("raw", ["", "no json at all", "[1, 2, 3]"])
    def test_no_object_returns_empty(self, raw):
        assert clean_json_response(raw) == "{}"


class TestParseDecimal:
    @pytest.mark.parametrize("value, expected", [
        (500, Decimal("500")),
        (416.67, Decimal("416.67")),
        ("83.33", Decimal("83.33")),
        ("1,234.56", Decimal("1234.56")),
        ("$ 99.90", Decimal("99.90")),
        ("-12.50", Decimal("-12.50")),
        (Decimal("7.00"), Decimal("7.00")),
        (1e+20, Decimal("1E+20")),
        (2.5e-3, Decimal("0.0025")),
    ])
    def test_valid(self, value, expected):
        assert parse_decimal(value) == expected

    def test_float_exponent_kept(self):
        assert parse_decimal(1e+20) == Decimal("100000000000000000000")

    @pytest.mark.parametrize("value", [float("nan"), float("inf")])
    def test_non_finite_float_is_none(self, value):
        assert parse_decimal(value) is None

    @pytest.mark.parametrize("value", [None, True, False, "", "n/a", "1.2.3"])
    def test_invalid_returns_none(self, value):
        assert parse_decimal(value) is None


class TestParseInt:
    def test_int(self):
        assert parse_int(3) == 3

    def test_float_string(self):
        assert parse_int("2.0") == 2

    def test_none(self):
        assert parse_int(None) is None

    def test_garbage(self):
        assert parse_int("many") is None


class TestParseDate:
    @pytest.mark.parametrize("value", [
        "2024-09-12",
        "2024-09-12T10:00:00",
        "12.09.2024",
        "12/09/2024",
        "2024/09/12",
        date(2024, 9, 12),
        datetime(2024, 9, 12, 8, 0),
    ])
    def test_valid(self, value):
        assert parse_date(value) == date(2024, 9, 12)

    @pytest.mark.parametrize("value", [None, "", "yesterday", "2024-13-45"])
    def test_invalid_returns_none(self, value):
        assert parse_date(value) is None


class TestParseStr:
    def test_strips(self):
        assert parse_str("  hello  ") == "hello"

    def test_number_to_string(self):
        assert parse_str(42) == "42"

    @pytest.mark.parametrize("value", [None, "", "   ", {"a": 1}, [1]])
    def test_empty_or_structured_is_none(self, value):
        assert parse_str(value) is None


class TestFormatAmount:
    def test_two_decimals_kept(self):
        assert format_amount(Decimal("500.00")) == "500.00"

    def test_no_exponent(self):
        assert format_amount(Decimal("2E+1")) == "20"

    def test_no_thousands_separator(self):
        assert format_amount(Decimal("1234567.89")) == "1234567.89"

    def test_none(self):
        assert format_amount(None) == ""
