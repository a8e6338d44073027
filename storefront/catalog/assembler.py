"""
Catalog View Assembler

Composes the visibility filter, discount resolver, image resolver, rating
aggregator and price calculator into the denormalized ``CatalogView`` that
listing endpoints return.

Category slugs are looked up once per batch, never per product.
"""

import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence

import structlog
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.catalog import store
from storefront.catalog.discounts import ActiveDiscount, resolve_active_discounts
from storefront.catalog.images import resolve_image_url
from storefront.catalog.localization import localized
from storefront.catalog.pricing import calculate_price
from storefront.catalog.ratings import aggregate_ratings
from storefront.catalog.rows import field
from storefront.catalog.visibility import filter_visible
from storefront.config import get_settings
from storefront.config.settings import CatalogSettings

logger = structlog.get_logger(__name__)


class CatalogView(BaseModel):
    """Externally visible representation of a product on listing pages"""
    id: uuid.UUID
    name: str
    title: str
    slug: str
    base_price: float
    price_cents: float
    final_price: float
    savings: float
    has_discount: bool
    image_url: str
    category_id: Optional[uuid.UUID]
    category_slug: str
    currency: str
    discount_percent: Optional[float]
    promo_end_date: Optional[datetime]
    sold_count: int
    rating: float
    review_count: int


class CatalogViewAssembler:
    """
    Builds catalog views for a batch of products.

    Example:
        assembler = CatalogViewAssembler()
        views = await assembler.assemble(db, products)
    """

    def __init__(self, settings: Optional[CatalogSettings] = None):
        self.settings = settings or get_settings().catalog

    def build_view(
        self,
        product: Any,
        discount: Optional[ActiveDiscount],
        category_slug: Optional[str],
        locale: Optional[str] = None,
    ) -> CatalogView:
        """Pure assembly of one view from already-resolved parts."""
        name = localized(product, "name").resolve(locale)
        base_price = field(product, "base_price") or 0
        price = calculate_price(base_price, discount.discount_percent if discount else None)
        ratings = aggregate_ratings(field(product, "reviews"))

        return CatalogView(
            id=field(product, "id"),
            name=name,
            title=name,
            slug=field(product, "slug"),
            base_price=float(price.original_price),
            price_cents=float(price.original_price),
            final_price=float(price.final_price),
            savings=float(price.savings),
            has_discount=price.has_discount,
            image_url=resolve_image_url(
                field(product, "images"),
                legacy_url=field(product, "image_url"),
                placeholder=self.settings.placeholder_image_url,
            ),
            category_id=field(product, "category_id"),
            category_slug=category_slug or self.settings.default_category_slug,
            currency=self.settings.currency,
            discount_percent=float(discount.discount_percent) if discount else None,
            promo_end_date=discount.ends_at if discount else None,
            sold_count=int(field(product, "sold_count") or 0),
            rating=ratings.rating,
            review_count=ratings.review_count,
        )

    async def assemble(
        self,
        session: AsyncSession,
        products: Sequence[Any],
        discounts: Optional[Dict[uuid.UUID, ActiveDiscount]] = None,
        locale: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> List[CatalogView]:
        """
        Assemble views for ``products``, preserving their order.

        Args:
            session: Store session for the batched lookups
            products: Product rows with ``images`` and ``reviews`` loaded
            discounts: Pre-resolved discounts; resolved here when None
            locale: Locale for localized names
            now: Passed to the discount resolver to gate by time window

        Raises:
            StoreUnavailable: when the category lookup fails
        """
        visible = filter_visible(products)
        if not visible:
            return []

        product_ids = [field(product, "id") for product in visible]
        if discounts is None:
            discounts = await resolve_active_discounts(session, product_ids, now=now)

        category_slugs = await store.fetch_category_slugs(
            session, [field(product, "category_id") for product in visible]
        )

        views = []
        for product in visible:
            category_id = field(product, "category_id")
            views.append(
                self.build_view(
                    product,
                    discounts.get(store.as_uuid(field(product, "id"))),
                    category_slugs.get(store.as_uuid(category_id)) if category_id else None,
                    locale=locale,
                )
            )
        logger.debug("Assembled catalog views", count=len(views), discounted=sum(v.has_discount for v in views))
        return views
