"""
Products API Endpoints

Catalog listings (``{products}``) and product detail (``{success, data}``).

Listings fail soft: if the store is unavailable they answer 200 with an
empty list. The detail endpoint is admin-style and lets the error handler
answer 5xx.
"""

from typing import Any, Awaitable, Callable, Dict, List, Optional

import structlog
from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.catalog import store
from storefront.catalog.assembler import CatalogView, CatalogViewAssembler
from storefront.catalog.discounts import index_discounts
from storefront.catalog.errors import NotFound, StoreUnavailable
from storefront.catalog.images import image_payload, resolve_variant_image, sorted_images
from storefront.catalog.localization import is_supported_locale, localized
from storefront.catalog.rows import utcnow
from storefront.catalog.visibility import filter_visible
from storefront.config import get_settings
from storefront.database.connection import get_db_dependency
from storefront.serving.cache import cache_key, products_cache

logger = structlog.get_logger(__name__)
router = APIRouter()


class CatalogListResponse(BaseModel):
    """Listing response"""
    products: List[CatalogView]


def _locale(locale: Optional[str]) -> Optional[str]:
    return locale.lower() if is_supported_locale(locale) else None


def _discount_now():
    """Instant used to gate discounts by their window, when enabled."""
    return utcnow() if get_settings().catalog.gate_discounts_by_window else None


def _payload(views: List[CatalogView]) -> Dict[str, Any]:
    return {"products": [view.model_dump(mode="json") for view in views]}


async def _listing(key: str, build: Callable[[], Awaitable[List[CatalogView]]]) -> CatalogListResponse:
    """Serve a listing through the cache; degrade to empty on store failure."""

    async def factory() -> Dict[str, Any]:
        return _payload(await build())

    try:
        payload = await products_cache.get_or_set(key, factory)
    except StoreUnavailable as e:
        logger.error("Listing degraded to empty result", key=key, error=e.message)
        return CatalogListResponse(products=[])

    return CatalogListResponse(**payload)


@router.get("/top", response_model=CatalogListResponse)
async def top_products(
    limit: Optional[int] = Query(None, ge=1, le=50),
    locale: Optional[str] = None,
    db: AsyncSession = Depends(get_db_dependency),
) -> CatalogListResponse:
    """Best-selling visible products."""
    settings = get_settings().catalog
    limit = limit or settings.top_products_limit
    locale = _locale(locale)

    async def build() -> List[CatalogView]:
        products = await store.list_top_products(db, limit)
        return await CatalogViewAssembler(settings).assemble(
            db, products, locale=locale, now=_discount_now()
        )

    return await _listing(cache_key("top", limit=limit, locale=locale), build)


@router.get("/promo", response_model=CatalogListResponse)
async def promo_products(
    limit: Optional[int] = Query(None, ge=1, le=50),
    locale: Optional[str] = None,
    db: AsyncSession = Depends(get_db_dependency),
) -> CatalogListResponse:
    """
    Products behind the most recently created active discounts.

    Ordered by discount recency, newest first.
    """
    settings = get_settings().catalog
    limit = limit or settings.promo_products_limit
    locale = _locale(locale)

    async def build() -> List[CatalogView]:
        rows = await store.list_recent_active_discounts(db, limit)
        discounts = index_discounts(rows, now=_discount_now())
        if not discounts:
            return []

        products = await store.fetch_products_by_ids(db, list(discounts))
        return await CatalogViewAssembler(settings).assemble(
            db, products, discounts=discounts, locale=locale
        )

    return await _listing(cache_key("promo", limit=limit, locale=locale), build)


@router.get("", response_model=CatalogListResponse)
async def list_products(
    category: Optional[str] = None,
    search: Optional[str] = None,
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    locale: Optional[str] = None,
    db: AsyncSession = Depends(get_db_dependency),
) -> CatalogListResponse:
    """Newest visible products, filterable by category slug and name."""
    settings = get_settings().catalog
    locale = _locale(locale)

    async def build() -> List[CatalogView]:
        products = await store.list_products(
            db,
            category_slug=category,
            search=search,
            offset=(page - 1) * page_size,
            limit=page_size,
        )
        return await CatalogViewAssembler(settings).assemble(
            db, products, locale=locale, now=_discount_now()
        )

    key = cache_key(
        "list",
        category=category,
        search=search,
        page=page,
        page_size=page_size,
        locale=locale,
    )
    return await _listing(key, build)


@router.get("/{slug}")
async def get_product(
    slug: str,
    locale: Optional[str] = None,
    db: AsyncSession = Depends(get_db_dependency),
) -> Dict[str, Any]:
    """
    Product detail: catalog view plus description, images and variants.

    Registered after the listings, so the slugs ``top`` and ``promo`` are
    reserved: those paths always answer with the listing.
    """
    settings = get_settings().catalog
    locale = _locale(locale)

    product = await store.get_product_by_slug(db, slug)
    if product is None:
        raise NotFound("Product not found")

    views = await CatalogViewAssembler(settings).assemble(
        db, [product], locale=locale, now=_discount_now()
    )
    data = views[0].model_dump(mode="json")

    name = data["name"]
    product_images = [img for img in product.images if img.variant_id is None]
    data["description"] = localized(product, "description").resolve(locale)
    data["images"] = [image_payload(img, fallback_alt=name) for img in sorted_images(product_images)]
    data["variants"] = [
        {
            "id": variant.id,
            "sku": variant.sku,
            "size": variant.size.name if variant.size else None,
            "color": variant.color.name if variant.color else None,
            "color_hex": variant.color.hex_code if variant.color else None,
            "price": float(variant.price) if variant.price is not None else data["base_price"],
            "stock": variant.stock,
            "is_available": variant.is_available,
            "image_url": resolve_variant_image(
                [img for img in product.images if img.variant_id == variant.id],
                product.images,
                legacy_url=product.image_url,
                placeholder=settings.placeholder_image_url,
            ),
        }
        for variant in filter_visible(product.variants)
    ]

    return {"success": True, "data": data}
