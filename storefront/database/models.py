"""
Database Models - Storefront Catalog

Normalized catalog tables read by the resolution engine:

Catalog:
- Product, ProductVariant, ProductImage, Review

Pricing:
- ProductDiscount: per-product discount rows
- Promotion: store-wide promotion banners

Reference data:
- Category, Color, Size

Rows are soft-deleted through ``deleted_at``; the engine never writes.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Optional, List
import uuid

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    Uuid,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    """Base class for all database models"""
    pass


# =============================================================================
# ENUMERATIONS
# =============================================================================

class ProductStatus(str, Enum):
    """Product lifecycle status"""
    ACTIVE = "active"
    INACTIVE = "inactive"
    ARCHIVED = "archived"


# =============================================================================
# REFERENCE DATA
# =============================================================================

class Category(Base):
    """Product category with localized names"""
    __tablename__ = "categories"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    name_ar: Mapped[Optional[str]] = mapped_column(String(200))
    name_fr: Mapped[Optional[str]] = mapped_column(String(200))
    slug: Mapped[str] = mapped_column(String(200), unique=True, nullable=False)
    sort_order: Mapped[int] = mapped_column(Integer, default=0)
    is_featured: Mapped[bool] = mapped_column(Boolean, default=False)
    image_url: Mapped[Optional[str]] = mapped_column(Text)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    deleted_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))

    products: Mapped[List["Product"]] = relationship(back_populates="category")


class Color(Base):
    """Variant color option"""
    __tablename__ = "colors"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    hex_code: Mapped[Optional[str]] = mapped_column(String(9))
    sort_order: Mapped[int] = mapped_column(Integer, default=0)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    deleted_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))


class Size(Base):
    """Variant size option"""
    __tablename__ = "sizes"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(50), nullable=False)
    sort_order: Mapped[int] = mapped_column(Integer, default=0)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    deleted_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))


# =============================================================================
# CATALOG
# =============================================================================

class Product(Base):
    """
    Catalog product.

    ``image_url`` is the legacy single-image column kept for records created
    before ``product_images`` existed.
    """
    __tablename__ = "products"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(300), nullable=False)
    name_ar: Mapped[Optional[str]] = mapped_column(String(300))
    name_fr: Mapped[Optional[str]] = mapped_column(String(300))
    slug: Mapped[str] = mapped_column(String(300), unique=True, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)
    description_ar: Mapped[Optional[str]] = mapped_column(Text)
    description_fr: Mapped[Optional[str]] = mapped_column(Text)

    base_price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=0)
    category_id: Mapped[Optional[uuid.UUID]] = mapped_column(ForeignKey("categories.id"))
    status: Mapped[str] = mapped_column(String(20), nullable=False, default=ProductStatus.ACTIVE.value)
    sold_count: Mapped[int] = mapped_column(Integer, default=0)
    image_url: Mapped[Optional[str]] = mapped_column(Text)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )
    deleted_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))

    category: Mapped[Optional["Category"]] = relationship(back_populates="products")
    images: Mapped[List["ProductImage"]] = relationship(back_populates="product")
    variants: Mapped[List["ProductVariant"]] = relationship(back_populates="product")
    reviews: Mapped[List["Review"]] = relationship(back_populates="product")
    discounts: Mapped[List["ProductDiscount"]] = relationship(back_populates="product")

    __table_args__ = (
        Index("ix_products_status_sold", "status", "sold_count"),
        Index("ix_products_category", "category_id"),
    )


class ProductVariant(Base):
    """Size/color variant of a product with its own stock"""
    __tablename__ = "product_variants"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    product_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("products.id"), nullable=False)
    size_id: Mapped[Optional[uuid.UUID]] = mapped_column(ForeignKey("sizes.id"))
    color_id: Mapped[Optional[uuid.UUID]] = mapped_column(ForeignKey("colors.id"))
    sku: Mapped[Optional[str]] = mapped_column(String(100))
    price: Mapped[Optional[Decimal]] = mapped_column(Numeric(12, 2))
    stock: Mapped[int] = mapped_column(Integer, default=0)
    is_available: Mapped[bool] = mapped_column(Boolean, default=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    deleted_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))

    product: Mapped["Product"] = relationship(back_populates="variants")
    size: Mapped[Optional["Size"]] = relationship()
    color: Mapped[Optional["Color"]] = relationship()

    __table_args__ = (
        CheckConstraint("stock >= 0", name="ck_variant_stock_non_negative"),
        Index("ix_product_variants_product", "product_id"),
    )


class ProductImage(Base):
    """Product or variant image; ``position`` ascending is display order"""
    __tablename__ = "product_images"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    product_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("products.id"), nullable=False)
    variant_id: Mapped[Optional[uuid.UUID]] = mapped_column(ForeignKey("product_variants.id"))
    image_url: Mapped[str] = mapped_column(Text, nullable=False)
    alt_text: Mapped[Optional[str]] = mapped_column(String(300))
    is_main: Mapped[bool] = mapped_column(Boolean, default=False)
    position: Mapped[int] = mapped_column(Integer, default=0)

    product: Mapped["Product"] = relationship(back_populates="images")


class Review(Base):
    """
    Customer review.

    ``rating`` is JSON because upstream writers have stored numbers, numeric
    strings and nulls in it.
    """
    __tablename__ = "reviews"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    product_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("products.id"), nullable=False)
    rating: Mapped[Optional[Any]] = mapped_column(JSON)
    comment: Mapped[Optional[str]] = mapped_column(Text)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    product: Mapped["Product"] = relationship(back_populates="reviews")


# =============================================================================
# PRICING
# =============================================================================

class ProductDiscount(Base):
    """Per-product discount"""
    __tablename__ = "product_discounts"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    product_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("products.id"), nullable=False)
    discount_percent: Mapped[Decimal] = mapped_column(Numeric(5, 2), nullable=False)
    starts_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    ends_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    active: Mapped[bool] = mapped_column(Boolean, default=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    product: Mapped["Product"] = relationship(back_populates="discounts")

    __table_args__ = (
        CheckConstraint(
            "discount_percent >= 0 AND discount_percent <= 100",
            name="ck_product_discount_percent_range",
        ),
        Index("ix_product_discounts_active", "active", "created_at"),
    )


class Promotion(Base):
    """Store-wide promotion banner, not tied to a product"""
    __tablename__ = "promotions"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    title: Mapped[str] = mapped_column(String(300), nullable=False)
    subtitle: Mapped[Optional[str]] = mapped_column(Text)
    badge_text: Mapped[Optional[str]] = mapped_column(String(100))
    image_url: Mapped[Optional[str]] = mapped_column(Text)
    discount_percent: Mapped[int] = mapped_column(Integer, default=0)
    starts_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    ends_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    active: Mapped[bool] = mapped_column(Boolean, default=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        CheckConstraint(
            "discount_percent >= 0 AND discount_percent <= 100",
            name="ck_promotion_discount_percent_range",
        ),
    )
