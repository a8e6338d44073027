"""
Promotion Selector

Chooses the single store-wide promotion banner for an instant, in two stages:

1. ``select_promotion`` picks a candidate. Active rows that have started and
   not expired are split into *timed* (future ``ends_at``) and *ongoing*
   (no ``ends_at``); the best timed one wins, else the best ongoing one.
2. ``should_display_banner`` gates rendering: only a promotion with an end
   instant is shown, since the banner is a countdown. A selected ongoing
   promotion is therefore returned but never displayed.

"Best" is the highest ``discount_percent``; equal percents go to the most
recently created row, then the smallest id.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any, Iterable, List, Optional, Tuple

from storefront.catalog.rows import as_utc, field


@dataclass(frozen=True)
class BannerDecision:
    """Selected promotion and whether it is rendered as a countdown banner"""
    promotion: Optional[Any]
    display_banner: bool
    countdown_ends_at: Optional[datetime]


def _percent(promotion: Any) -> Decimal:
    value = field(promotion, "discount_percent")
    return Decimal(str(value)) if value is not None else Decimal("0")


def _rank_key(promotion: Any) -> Tuple[Decimal, float, str]:
    created_at = as_utc(field(promotion, "created_at"))
    created_ts = created_at.timestamp() if created_at else float("-inf")
    # sorted() ascending: negate what should come first
    return (-_percent(promotion), -created_ts, str(field(promotion, "id", "")))


def _rank(promotions: List[Any]) -> List[Any]:
    return sorted(promotions, key=_rank_key)


def select_promotion(now: datetime, promotions: Iterable[Any]) -> Optional[Any]:
    """
    Select the promotion that is in effect at ``now``.

    A row whose ``ends_at`` equals ``now`` is neither expired nor in the
    future and is not a candidate.

    Args:
        now: The instant to resolve for
        promotions: Every promotion row, in any order

    Returns:
        The selected row, or None
    """
    now = as_utc(now)
    timed: List[Any] = []
    ongoing: List[Any] = []

    for promotion in promotions:
        if not field(promotion, "active"):
            continue

        ends_at = as_utc(field(promotion, "ends_at"))
        starts_at = as_utc(field(promotion, "starts_at"))

        if ends_at is not None and ends_at < now:
            continue
        if starts_at is not None and starts_at > now:
            continue

        if ends_at is None:
            ongoing.append(promotion)
        elif ends_at > now:
            timed.append(promotion)

    if timed:
        return _rank(timed)[0]
    if ongoing:
        return _rank(ongoing)[0]
    return None


def should_display_banner(promotion: Optional[Any]) -> bool:
    """Only promotions with an end instant are rendered (as a countdown)."""
    if promotion is None:
        return False
    return as_utc(field(promotion, "ends_at")) is not None


def resolve_banner(now: datetime, promotions: Iterable[Any]) -> BannerDecision:
    """Select, then gate by presence of an end date."""
    promotion = select_promotion(now, promotions)
    display = should_display_banner(promotion)
    return BannerDecision(
        promotion=promotion,
        display_banner=display,
        countdown_ends_at=as_utc(field(promotion, "ends_at")) if display else None,
    )
