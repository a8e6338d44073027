"""
Rating Aggregator

Review ratings come from heterogeneous upstream storage and may be missing,
strings, booleans, NaN or infinities. Only finite numbers count, in both the sum and the
denominator.
"""

import math
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from numbers import Real
from typing import Any, Iterable, List, Optional

from storefront.catalog.rows import field


@dataclass(frozen=True)
class RatingSummary:
    """Mean rating (one decimal) and number of valid ratings"""
    rating: float
    review_count: int


EMPTY_RATING = RatingSummary(rating=0.0, review_count=0)


def valid_rating(value: Any) -> Optional[float]:
    """Return the rating as a float, or None if it is not a genuine number."""
    if isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        return float(value) if value.is_finite() else None
    if isinstance(value, Real):
        number = float(value)
        return number if math.isfinite(number) else None
    return None


def aggregate_ratings(reviews: Optional[Iterable[Any]]) -> RatingSummary:
    """
    Aggregate a product's reviews.

    Args:
        reviews: Review rows or mappings with a ``rating`` field

    Returns:
        RatingSummary; (0, 0) when no review carries a valid rating
    """
    ratings: List[float] = []
    for review in reviews or []:
        rating = valid_rating(field(review, "rating"))
        if rating is not None:
            ratings.append(rating)

    if not ratings:
        return EMPTY_RATING

    mean = Decimal(str(sum(ratings) / len(ratings)))
    return RatingSummary(
        rating=float(mean.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP)),
        review_count=len(ratings),
    )
