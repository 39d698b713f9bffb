"""Tests for the display formatting helpers."""

import pytest

from adinsight.schema.design_system import (
    format_amount,
    format_currency,
    format_integer,
    format_percentage,
    format_ratio,
)


class TestFormatCurrency:
    def test_thousands(self):
        assert format_currency(3000) == "3,000 TL"

    def test_rounds_to_whole_units(self):
        assert format_currency(1234.6) == "1,235 TL"

    def test_zero(self):
        assert format_currency(0) == "0 TL"

    def test_custom_suffix(self):
        assert format_currency(50, suffix="EUR") == "50 EUR"

    def test_no_suffix(self):
        assert format_currency(50, suffix="") == "50"


class TestFormatRatio:
    def test_two_decimals(self):
        assert format_ratio(2) == "2.00x"
        assert format_ratio(5.2) == "5.20x"

    def test_zero(self):
        assert format_ratio(0) == "0.00x"


class TestFormatPercentage:
    def test_value_already_in_percent(self):
        assert format_percentage(1.0) == "1.00%"
        assert format_percentage(12.5) == "12.50%"


class TestFormatIntegers:
    def test_integer(self):
        assert format_integer(28500.0) == "28,500"

    def test_amount(self):
        assert format_amount(1234.5) == "1,234.50"


class TestMissingValues:
    @pytest.mark.parametrize("fn", [
        format_currency, format_ratio, format_percentage, format_integer,
        format_amount,
    ])
    @pytest.mark.parametrize("value", [None, float("nan")])
    def test_not_available(self, fn, value):
        assert fn(value) == "N/A"
