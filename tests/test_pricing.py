"""
Price extraction tests.

Tests that:
1. min + max produce a range string
2. min alone produces "From $x"
3. average alone produces "Avg $x"
4. Missing, zero or malformed amounts fall back to "Check website"
5. Amounts are formatted without stray decimals

Run with: pytest tests/test_pricing.py -v
"""

import pytest

from trip_events.models.events import PRICE_CHECK_WEBSITE
from trip_events.services.integrations.pricing import extract_price, format_amount


class TestExtractPricePrecedence:
    """Test the min/max → min → avg → sentinel precedence."""

    def test_min_and_max_give_range(self):
        assert extract_price(20, 80) == "$20-$80"

    def test_min_only_gives_from(self):
        assert extract_price(15, None) == "From $15"

    def test_average_only_gives_avg(self):
        assert extract_price(None, None, 30) == "Avg $30"

    def test_range_wins_over_average(self):
        assert extract_price(20, 80, 45) == "$20-$80"

    def test_min_wins_over_average(self):
        assert extract_price(20, None, 45) == "From $20"

    def test_max_only_falls_through_to_average(self):
        """A lone maximum is not enough for a range or a "From" price."""
        assert extract_price(None, 80, 45) == "Avg $45"

    def test_max_only_without_average_is_sentinel(self):
        assert extract_price(None, 80) == PRICE_CHECK_WEBSITE

    def test_nothing_gives_sentinel(self):
        assert extract_price() == PRICE_CHECK_WEBSITE


class TestExtractPriceMalformed:
    """Test that bad upstream amounts never raise."""

    def test_zero_amounts_are_absent(self):
        assert extract_price(0, 0) == PRICE_CHECK_WEBSITE

    def test_negative_amounts_are_absent(self):
        assert extract_price(-5, 10) == PRICE_CHECK_WEBSITE

    def test_non_numeric_strings_are_absent(self):
        assert extract_price("cheap", "pricey", "n/a") == PRICE_CHECK_WEBSITE

    def test_numeric_strings_are_accepted(self):
        assert extract_price("25", "60") == "$25-$60"

    def test_booleans_are_absent(self):
        assert extract_price(True, None) == PRICE_CHECK_WEBSITE

    def test_unhashable_values_are_absent(self):
        assert extract_price([1], {"a": 2}) == PRICE_CHECK_WEBSITE

    @pytest.mark.parametrize("value", ["nan", "inf", "-inf", "Infinity", float("nan"), float("inf")])
    def test_non_finite_amounts_are_absent(self, value):
        assert extract_price(value, None) == PRICE_CHECK_WEBSITE
        assert extract_price(None, None, value) == PRICE_CHECK_WEBSITE

    def test_non_finite_bound_drops_range(self):
        assert extract_price(float("inf"), 50) == PRICE_CHECK_WEBSITE
        assert extract_price(20, float("nan")) == "From $20"


class TestFormatAmount:
    """Test dollar formatting."""

    def test_whole_float_has_no_decimals(self):
        assert format_amount(49.0) == "$49"

    def test_fractional_amount_has_two_decimals(self):
        assert format_amount(49.5) == "$49.50"

    def test_integer(self):
        assert format_amount(120) == "$120"

    def test_range_with_fractional_amounts(self):
        assert extract_price(49.5, 199.5) == "$49.50-$199.50"
