"""
Reference Data API Endpoints

Categories, colors, sizes and product variants. Only visible rows are
returned; every response uses the ``{success, data}`` envelope.
"""

import uuid
from decimal import Decimal
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.catalog import store
from storefront.catalog.errors import ValidationError
from storefront.catalog.localization import is_supported_locale, localized
from storefront.database.connection import get_db_dependency
from storefront.serving.cache import reference_cache

router = APIRouter()


class CategoryOut(BaseModel):
    id: uuid.UUID
    name: str
    slug: str
    sort_order: int
    is_featured: bool
    image_url: Optional[str]


class ColorOut(BaseModel):
    id: uuid.UUID
    name: str
    hex_code: Optional[str]
    sort_order: int

    class Config:
        from_attributes = True


class SizeOut(BaseModel):
    id: uuid.UUID
    name: str
    sort_order: int

    class Config:
        from_attributes = True


class VariantOut(BaseModel):
    id: uuid.UUID
    product_id: uuid.UUID
    sku: Optional[str]
    size: Optional[SizeOut]
    color: Optional[ColorOut]
    price: Optional[Decimal]
    stock: int
    is_available: bool

    class Config:
        from_attributes = True


def _envelope(data: List[Any]) -> Dict[str, Any]:
    return {"success": True, "data": data}


@router.get("/categories")
async def list_categories(
    locale: Optional[str] = None,
    db: AsyncSession = Depends(get_db_dependency),
) -> Dict[str, Any]:
    """Visible categories by sort order, then name."""
    locale = locale.lower() if is_supported_locale(locale) else None

    async def factory() -> List[Dict[str, Any]]:
        rows = await store.list_categories(db)
        return [
            CategoryOut(
                id=row.id,
                name=localized(row, "name").resolve(locale),
                slug=row.slug,
                sort_order=row.sort_order,
                is_featured=row.is_featured,
                image_url=row.image_url,
            ).model_dump(mode="json")
            for row in rows
        ]

    return _envelope(await reference_cache.get_or_set(f"categories:locale={locale or ''}", factory))


@router.get("/colors")
async def list_colors(db: AsyncSession = Depends(get_db_dependency)) -> Dict[str, Any]:
    """Visible colors by sort order, then name."""

    async def factory() -> List[Dict[str, Any]]:
        return [ColorOut.model_validate(row).model_dump(mode="json") for row in await store.list_colors(db)]

    return _envelope(await reference_cache.get_or_set("colors", factory))


@router.get("/sizes")
async def list_sizes(db: AsyncSession = Depends(get_db_dependency)) -> Dict[str, Any]:
    """Visible sizes by sort order, then name."""

    async def factory() -> List[Dict[str, Any]]:
        return [SizeOut.model_validate(row).model_dump(mode="json") for row in await store.list_sizes(db)]

    return _envelope(await reference_cache.get_or_set("sizes", factory))


@router.get("/variants")
async def list_variants(
    product_id: Optional[str] = None,
    db: AsyncSession = Depends(get_db_dependency),
) -> Dict[str, Any]:
    """Visible variants of a product, oldest first."""
    if not product_id:
        raise ValidationError("Product ID is required")

    rows = await store.list_variants(db, product_id)
    return _envelope([VariantOut.model_validate(row) for row in rows])
