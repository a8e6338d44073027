"""
Unit Tests - Price Calculation
"""
from decimal import Decimal

import pytest

from storefront.catalog.pricing import calculate_price, round_whole


class TestCalculatePrice:
    """Tests for calculate_price"""

    def test_no_discount_keeps_base_price(self):
        """Test undiscounted prices are returned unrounded"""
        quote = calculate_price(Decimal("59.99"))

        assert quote.original_price == Decimal("59.99")
        assert quote.final_price == Decimal("59.99")
        assert quote.savings == 0
        assert quote.has_discount is False

    @pytest.mark.parametrize("percent", [None, 0, -5])
    def test_non_positive_percent_is_no_discount(self, percent):
        """Test None, zero and negative percents mean no discount"""
        quote = calculate_price(100, percent)

        assert quote.has_discount is False
        assert quote.final_price == Decimal("100")

    def test_quarter_off(self):
        """Test a plain percentage discount"""
        quote = calculate_price(100, 25)

        assert quote.final_price == Decimal("75")
        assert quote.savings == Decimal("25")
        assert quote.has_discount is True

    def test_rounds_half_up_to_whole_units(self):
        """Test 10% and 15% off 59.99 (53.991 and 50.9915) round to whole units"""
        assert calculate_price(Decimal("59.99"), 10).final_price == Decimal("54")
        assert calculate_price(Decimal("59.99"), 15).final_price == Decimal("51")

    def test_exact_half_rounds_up(self):
        """Test x.5 rounds away from zero"""
        quote = calculate_price(5, 50)

        assert quote.final_price == Decimal("3")
        assert quote.savings == Decimal("2")

    def test_full_discount(self):
        """Test 100% off is free"""
        quote = calculate_price(80, 100)

        assert quote.final_price == 0
        assert quote.savings == Decimal("80")

    def test_final_never_exceeds_base(self):
        """Test fractional prices are not rounded above their base"""
        quote = calculate_price(Decimal("0.6"), 1)

        assert quote.final_price <= quote.original_price
        assert quote.savings >= 0

    def test_zero_base_price(self):
        """Test a free product stays free"""
        quote = calculate_price(0, 30)

        assert quote.final_price == 0
        assert quote.savings == 0

    def test_accepts_floats(self):
        """Test float inputs are priced without binary artifacts"""
        quote = calculate_price(19.9, 10)

        assert quote.final_price == Decimal("18")

    def test_negative_base_rejected(self):
        """Test negative base prices raise"""
        with pytest.raises(ValueError):
            calculate_price(-1, 10)

    def test_percent_above_hundred_rejected(self):
        """Test percents over 100 raise"""
        with pytest.raises(ValueError):
            calculate_price(100, 101)


def test_round_whole():
    """Test half-up rounding helper"""
    assert round_whole(Decimal("2.5")) == Decimal("3")
    assert round_whole(Decimal("2.49")) == Decimal("2")


@pytest.mark.parametrize("base", [Decimal("0"), Decimal("1"), Decimal("9.99"), Decimal("59.99"), Decimal("1234.50")])
def test_final_price_bounded_and_rounded(base):
    """Test final is the half-up rounded discounted price, never above base"""
    for percent in range(0, 101):
        quote = calculate_price(base, percent)
        expected = min(round_whole(base * (1 - Decimal(percent) / 100)), base) if percent > 0 else base

        assert quote.final_price <= base
        assert quote.final_price == expected
