"""
Discount Resolver

Maps a batch of product ids to the discount currently attached to each.

Eligibility is ``active = true``. The ``[starts_at, ends_at]`` window is only
checked when the caller passes ``now``; listing endpoints do so when
``CATALOG_GATE_DISCOUNTS_BY_WINDOW`` is set. With several eligible rows for
one product, the most recently created one wins.

The resolver is fail-soft: a store failure yields an empty map.
"""

import uuid
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, Iterable, Optional, Sequence

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.catalog import store
from storefront.catalog.errors import StoreUnavailable
from storefront.catalog.rows import as_utc, field

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class ActiveDiscount:
    """Discount attached to a product in a catalog view"""
    discount_percent: Decimal
    ends_at: Optional[datetime]


def is_discount_valid(discount: Any, now: datetime) -> bool:
    """Active and ``now`` within the optional ``[starts_at, ends_at]`` window."""
    if discount is None or not field(discount, "active"):
        return False

    now = as_utc(now)
    starts_at = as_utc(field(discount, "starts_at"))
    ends_at = as_utc(field(discount, "ends_at"))

    if starts_at is not None and now < starts_at:
        return False
    if ends_at is not None and now > ends_at:
        return False
    return True


def index_discounts(
    rows: Iterable[Any],
    now: Optional[datetime] = None,
) -> Dict[uuid.UUID, ActiveDiscount]:
    """
    Reduce discount rows to one entry per product.

    Args:
        rows: Discount rows ordered newest first
        now: When given, rows outside their time window are skipped

    Returns:
        product_id -> ActiveDiscount, first eligible row per product
    """
    discounts: Dict[uuid.UUID, ActiveDiscount] = {}
    for row in rows:
        if not field(row, "active"):
            continue
        if now is not None and not is_discount_valid(row, now):
            continue

        product_id = store.as_uuid(field(row, "product_id"))
        if product_id in discounts:
            continue
        discounts[product_id] = ActiveDiscount(
            discount_percent=Decimal(str(field(row, "discount_percent"))),
            ends_at=as_utc(field(row, "ends_at")),
        )
    return discounts


async def resolve_active_discounts(
    session: AsyncSession,
    product_ids: Sequence[Any],
    now: Optional[datetime] = None,
) -> Dict[uuid.UUID, ActiveDiscount]:
    """
    Resolve the active discount for each product.

    An empty batch returns without touching the store.
    """
    if not product_ids:
        return {}

    try:
        rows = await store.fetch_active_discounts(session, product_ids)
    except StoreUnavailable as e:
        logger.warning(
            "Discount lookup failed, pricing without discounts",
            products=len(product_ids),
            error=e.message,
        )
        return {}

    return index_discounts(rows, now)
