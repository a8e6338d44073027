"""
Price Calculator

Applies a discount percentage to a base price. Discounted prices are rounded
half-up to whole currency units; undiscounted prices are returned unchanged.
No currency conversion happens here.
"""

from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Optional, Union

Number = Union[int, float, Decimal]

_WHOLE_UNIT = Decimal("1")
_HUNDRED = Decimal("100")


@dataclass(frozen=True)
class PriceQuote:
    """Result of pricing one product"""
    original_price: Decimal
    final_price: Decimal
    savings: Decimal
    has_discount: bool


def to_decimal(value: Any) -> Decimal:
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def round_whole(value: Decimal) -> Decimal:
    return value.quantize(_WHOLE_UNIT, rounding=ROUND_HALF_UP)


def calculate_price(base_price: Number, discount_percent: Optional[Number] = None) -> PriceQuote:
    """
    Price a product.

    Args:
        base_price: Non-negative price in currency units
        discount_percent: Percentage in [0, 100]; None or <= 0 means no discount

    Returns:
        PriceQuote

    Raises:
        ValueError: base_price is negative or discount_percent exceeds 100
    """
    base = to_decimal(base_price)
    if base < 0:
        raise ValueError(f"base_price must be non-negative, got {base}")

    if discount_percent is None or to_decimal(discount_percent) <= 0:
        return PriceQuote(
            original_price=base,
            final_price=base,
            savings=Decimal("0"),
            has_discount=False,
        )

    percent = to_decimal(discount_percent)
    if percent > _HUNDRED:
        raise ValueError(f"discount_percent must be within [0, 100], got {percent}")

    # Fractional prices can round up past the base (9.99 at 1% is 10); cap at base
    final_price = min(round_whole(base * (1 - percent / _HUNDRED)), base)
    return PriceQuote(
        original_price=base,
        final_price=final_price,
        savings=round_whole(base - final_price),
        has_discount=True,
    )
