"""
Promotions API Endpoints

The active store-wide banner plus admin-style reads of the promotion and
discount tables.
"""

import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional

import structlog
from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.catalog import store
from storefront.catalog.errors import StoreUnavailable
from storefront.catalog.promotions import resolve_banner
from storefront.catalog.rows import utcnow
from storefront.database.connection import get_db_dependency
from storefront.serving.cache import promotions_cache

logger = structlog.get_logger(__name__)
router = APIRouter()


class PromotionOut(BaseModel):
    """Promotion row"""
    id: uuid.UUID
    title: str
    subtitle: Optional[str]
    badge_text: Optional[str]
    image_url: Optional[str]
    discount_percent: int
    starts_at: Optional[datetime]
    ends_at: Optional[datetime]
    active: bool
    created_at: Optional[datetime]

    class Config:
        from_attributes = True


class DiscountOut(BaseModel):
    """Product discount row"""
    id: uuid.UUID
    product_id: uuid.UUID
    discount_percent: float
    starts_at: Optional[datetime]
    ends_at: Optional[datetime]
    active: bool
    created_at: Optional[datetime]

    class Config:
        from_attributes = True


class ActiveBannerResponse(BaseModel):
    """Selected promotion and whether to render it as a countdown banner"""
    promotion: Optional[PromotionOut]
    display_banner: bool
    countdown_ends_at: Optional[datetime]


async def _promotion_rows(db: AsyncSession) -> List[Dict[str, Any]]:
    """Every promotion row as JSON-ready dicts, through the cache."""

    async def factory() -> List[Dict[str, Any]]:
        rows = await store.list_promotions(db)
        return [PromotionOut.model_validate(row).model_dump(mode="json") for row in rows]

    return await promotions_cache.get_or_set("all", factory)


@router.get("/promotions/active", response_model=ActiveBannerResponse)
async def active_promotion(
    db: AsyncSession = Depends(get_db_dependency),
) -> ActiveBannerResponse:
    """
    Resolve the store-wide banner for the current instant.

    Rows are cached briefly; selection always runs against the current time.
    """
    try:
        rows = await _promotion_rows(db)
    except StoreUnavailable as e:
        logger.error("Promotion lookup degraded to no banner", error=e.message)
        rows = []

    decision = resolve_banner(utcnow(), rows)
    return ActiveBannerResponse(
        promotion=PromotionOut(**decision.promotion) if decision.promotion else None,
        display_banner=decision.display_banner,
        countdown_ends_at=decision.countdown_ends_at,
    )


@router.get("/promotions")
async def list_promotions(
    db: AsyncSession = Depends(get_db_dependency),
) -> Dict[str, Any]:
    """All promotion rows, newest first."""
    rows = await store.list_promotions(db)
    return {"success": True, "data": [PromotionOut.model_validate(row) for row in rows]}


@router.get("/discounts")
async def list_discounts(
    db: AsyncSession = Depends(get_db_dependency),
) -> Dict[str, Any]:
    """All product discount rows, newest first."""
    rows = await store.list_discounts(db)
    return {"success": True, "data": [DiscountOut.model_validate(row) for row in rows]}
