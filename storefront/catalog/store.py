"""
Catalog Store Queries

Every read the engine performs against the backing store. Public listings
apply ``visibility_criteria`` in the query and ``filter_visible`` on the rows,
so both forms of the predicate agree.

Each call is bounded by ``POSTGRES_QUERY_TIMEOUT``; driver errors and
timeouts surface as ``StoreUnavailable``.
"""

import asyncio
import uuid
from typing import Any, Dict, Iterable, List, Optional, Sequence

import structlog
from sqlalchemy import Select, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from storefront.catalog.errors import StoreUnavailable, ValidationError
from storefront.catalog.visibility import filter_visible, visibility_criteria
from storefront.config import get_settings
from storefront.database.models import (
    Category,
    Color,
    Product,
    ProductDiscount,
    ProductVariant,
    Promotion,
    Size,
)

logger = structlog.get_logger(__name__)


def as_uuid(value: Any) -> uuid.UUID:
    """Coerce an id from the wire to a UUID."""
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except ValueError:
        raise ValidationError(f"Invalid id: {value}")


def unique_ids(values: Iterable[Any]) -> List[uuid.UUID]:
    """UUIDs in first-seen order, without duplicates or empties."""
    seen: Dict[uuid.UUID, None] = {}
    for value in values:
        if value is None:
            continue
        seen.setdefault(as_uuid(value), None)
    return list(seen)


async def execute(session: AsyncSession, statement: Select, operation: str):
    """
    Run a statement with the configured timeout.

    Raises:
        StoreUnavailable: on any driver error or timeout
    """
    timeout = get_settings().database.query_timeout
    try:
        return await asyncio.wait_for(session.execute(statement), timeout=timeout)
    except asyncio.TimeoutError:
        logger.error("Catalog store timed out", operation=operation, timeout=timeout)
        raise StoreUnavailable(f"{operation} timed out after {timeout}s", operation=operation)
    except (SQLAlchemyError, OSError) as e:
        logger.error(
            "Catalog store query failed",
            operation=operation,
            error=str(e),
            error_type=type(e).__name__,
        )
        raise StoreUnavailable(f"{operation} failed: {e}", operation=operation) from e


def like_pattern(text: str) -> str:
    """Substring pattern for ``ilike`` with LIKE wildcards taken literally."""
    escaped = text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def _listing_query() -> Select:
    """Visible products with what the view needs, loaded in batch."""
    return (
        select(Product)
        .where(*visibility_criteria(Product))
        .options(selectinload(Product.images), selectinload(Product.reviews))
    )


# =============================================================================
# PRODUCTS
# =============================================================================

async def list_top_products(session: AsyncSession, limit: int) -> List[Product]:
    """Best sellers first, newest first among equals."""
    statement = (
        _listing_query()
        .order_by(Product.sold_count.desc().nulls_last(), Product.created_at.desc())
        .limit(limit)
    )
    result = await execute(session, statement, "list_top_products")
    return filter_visible(result.scalars().all())


async def fetch_products_by_ids(session: AsyncSession, product_ids: Sequence[Any]) -> List[Product]:
    """
    Visible products for the given ids, in the order of ``product_ids``.
    """
    ids = unique_ids(product_ids)
    if not ids:
        return []

    statement = _listing_query().where(Product.id.in_(ids))
    result = await execute(session, statement, "fetch_products_by_ids")
    by_id = {product.id: product for product in filter_visible(result.scalars().all())}
    return [by_id[product_id] for product_id in ids if product_id in by_id]


async def list_products(
    session: AsyncSession,
    category_slug: Optional[str] = None,
    search: Optional[str] = None,
    offset: int = 0,
    limit: int = 20,
) -> List[Product]:
    """Newest visible products, optionally by category slug and name search."""
    statement = _listing_query()

    if category_slug and category_slug != "all":
        category_ids = select(Category.id).where(
            Category.slug == category_slug,
            *visibility_criteria(Category),
        )
        statement = statement.where(Product.category_id.in_(category_ids))

    if search:
        pattern = like_pattern(search)
        statement = statement.where(
            or_(
                Product.name.ilike(pattern, escape="\\"),
                Product.name_ar.ilike(pattern, escape="\\"),
                Product.name_fr.ilike(pattern, escape="\\"),
            )
        )

    statement = statement.order_by(Product.created_at.desc()).offset(offset).limit(limit)
    result = await execute(session, statement, "list_products")
    return filter_visible(result.scalars().all())


async def get_product_by_slug(session: AsyncSession, slug: str) -> Optional[Product]:
    """A visible product with images, reviews and variants, or None."""
    statement = (
        _listing_query()
        .where(Product.slug == slug)
        .options(
            selectinload(Product.variants).selectinload(ProductVariant.size),
            selectinload(Product.variants).selectinload(ProductVariant.color),
        )
    )
    result = await execute(session, statement, "get_product_by_slug")
    products = filter_visible(result.scalars().all())
    return products[0] if products else None


async def fetch_category_slugs(session: AsyncSession, category_ids: Iterable[Any]) -> Dict[uuid.UUID, str]:
    """
    Map category ids to slugs in a single query.

    Soft-deleted categories are left out, so their products fall back to the
    default slug.
    """
    ids = unique_ids(category_ids)
    if not ids:
        return {}

    statement = select(Category).where(Category.id.in_(ids), *visibility_criteria(Category))
    result = await execute(session, statement, "fetch_category_slugs")
    return {category.id: category.slug for category in filter_visible(result.scalars().all())}


# =============================================================================
# DISCOUNTS & PROMOTIONS
# =============================================================================

async def fetch_active_discounts(session: AsyncSession, product_ids: Sequence[Any]) -> List[ProductDiscount]:
    """Active discount rows for the products, newest first."""
    statement = (
        select(ProductDiscount)
        .where(
            ProductDiscount.product_id.in_(unique_ids(product_ids)),
            ProductDiscount.active.is_(True),
        )
        .order_by(ProductDiscount.created_at.desc(), ProductDiscount.id)
    )
    result = await execute(session, statement, "fetch_active_discounts")
    return list(result.scalars().all())


async def list_recent_active_discounts(session: AsyncSession, limit: int) -> List[ProductDiscount]:
    """The most recently created active discount rows across the catalog."""
    statement = (
        select(ProductDiscount)
        .where(ProductDiscount.active.is_(True))
        .order_by(ProductDiscount.created_at.desc(), ProductDiscount.id)
        .limit(limit)
    )
    result = await execute(session, statement, "list_recent_active_discounts")
    return list(result.scalars().all())


async def list_discounts(session: AsyncSession) -> List[ProductDiscount]:
    """Every discount row, newest first."""
    statement = select(ProductDiscount).order_by(ProductDiscount.created_at.desc())
    result = await execute(session, statement, "list_discounts")
    return list(result.scalars().all())


async def list_promotions(session: AsyncSession) -> List[Promotion]:
    """Every promotion row, newest first."""
    statement = select(Promotion).order_by(Promotion.created_at.desc())
    result = await execute(session, statement, "list_promotions")
    return list(result.scalars().all())


# =============================================================================
# REFERENCE DATA
# =============================================================================

async def _list_reference(session: AsyncSession, model: Any, operation: str) -> List[Any]:
    statement = (
        select(model)
        .where(*visibility_criteria(model))
        .order_by(model.sort_order, model.name)
    )
    result = await execute(session, statement, operation)
    return filter_visible(result.scalars().all())


async def list_categories(session: AsyncSession) -> List[Category]:
    return await _list_reference(session, Category, "list_categories")


async def list_colors(session: AsyncSession) -> List[Color]:
    return await _list_reference(session, Color, "list_colors")


async def list_sizes(session: AsyncSession) -> List[Size]:
    return await _list_reference(session, Size, "list_sizes")


async def list_variants(session: AsyncSession, product_id: Any) -> List[ProductVariant]:
    """Visible variants of one product, oldest first."""
    statement = (
        select(ProductVariant)
        .where(ProductVariant.product_id == as_uuid(product_id), *visibility_criteria(ProductVariant))
        .options(selectinload(ProductVariant.size), selectinload(ProductVariant.color))
        .order_by(ProductVariant.created_at)
    )
    result = await execute(session, statement, "list_variants")
    return filter_visible(result.scalars().all())
