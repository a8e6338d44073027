"""
Test Suite Configuration
"""
import uuid
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import AsyncGenerator, Dict

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from storefront.database.connection import get_db_dependency
from storefront.database.models import (
    Base,
    Category,
    Color,
    Product,
    ProductDiscount,
    ProductImage,
    ProductVariant,
    Promotion,
    Review,
    Size,
)
from storefront.main import app
from tests.fakes import BrokenSession


def utc_now() -> datetime:
    return datetime.now(timezone.utc).replace(microsecond=0)


@pytest.fixture
async def test_engine():
    """In-memory catalog store"""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        echo=False,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(test_engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(bind=test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def test_db(session_factory, seeded_catalog) -> AsyncGenerator[AsyncSession, None]:
    """Fresh read session over the seeded catalog"""
    async with session_factory() as session:
        yield session


@pytest.fixture
async def client(test_db) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client bound to the seeded catalog"""

    async def _get_db():
        yield test_db

    app.dependency_overrides[get_db_dependency] = _get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
async def broken_client() -> AsyncGenerator[AsyncClient, None]:
    """HTTP client whose catalog store is unreachable"""

    async def _get_db():
        yield BrokenSession()

    app.dependency_overrides[get_db_dependency] = _get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
async def seeded_catalog(session_factory) -> Dict[str, uuid.UUID]:
    """
    A small catalog:

    - sneaker: main image, mixed-quality reviews, active 25% discount
    - boot: deleted category, legacy image only, active 10% discount already past its end
    - sandal: no image at all, inactive discount
    - ghost: soft-deleted, newest active discount
    - draft: inactive status, highest sold count
    """
    now = utc_now()
    ids = {name: uuid.uuid4() for name in (
        "shoes", "bags", "sneaker", "boot", "sandal", "ghost", "draft",
        "red", "blue", "size_42", "size_43", "variant_red_42", "variant_deleted",
        "summer", "winter", "expired", "upcoming", "disabled",
    )}

    rows = [
        Category(id=ids["shoes"], name="Shoes", name_fr="Chaussures", slug="shoes", sort_order=1),
        Category(id=ids["bags"], name="Bags", slug="bags", sort_order=2, deleted_at=now - timedelta(days=1)),
        Color(id=ids["red"], name="Red", hex_code="#FF0000", sort_order=1),
        Color(id=ids["blue"], name="Blue", hex_code="#0000FF", sort_order=2, deleted_at=now),
        Size(id=ids["size_42"], name="42", sort_order=1),
        Size(id=ids["size_43"], name="43", sort_order=2, deleted_at=now),
        Product(
            id=ids["sneaker"], name="Sneaker", name_ar="حذاء رياضي", slug="sneaker",
            description="Everyday sneaker", base_price=Decimal("100.00"), category_id=ids["shoes"],
            status="active", sold_count=50, created_at=now - timedelta(days=3),
        ),
        Product(
            id=ids["boot"], name="Boot", slug="boot", base_price=Decimal("200.00"),
            category_id=ids["bags"], status="active", sold_count=80,
            image_url="https://cdn.example.com/legacy-boot.jpg", created_at=now - timedelta(days=2),
        ),
        Product(
            id=ids["sandal"], name="Sandal", slug="sandal", base_price=Decimal("59.99"),
            status="active", sold_count=10, created_at=now - timedelta(days=1),
        ),
        Product(
            id=ids["ghost"], name="Ghost", slug="ghost", base_price=Decimal("10.00"),
            status="active", sold_count=1000, deleted_at=now, created_at=now - timedelta(days=4),
        ),
        Product(
            id=ids["draft"], name="Draft", slug="draft", base_price=Decimal("10.00"),
            status="inactive", sold_count=500, created_at=now - timedelta(days=5),
        ),
    ]
    rows += [
        ProductVariant(
            id=ids["variant_red_42"], product_id=ids["sneaker"], size_id=ids["size_42"],
            color_id=ids["red"], sku="SNK-RED-42", stock=5, created_at=now - timedelta(days=3),
        ),
        ProductVariant(
            id=ids["variant_deleted"], product_id=ids["sneaker"], size_id=ids["size_42"],
            color_id=ids["red"], sku="SNK-RED-42-OLD", stock=5, created_at=now - timedelta(days=3),
            deleted_at=now,
        ),
        ProductImage(product_id=ids["sneaker"], image_url="https://cdn.example.com/sneaker-side.jpg", position=0),
        ProductImage(
            product_id=ids["sneaker"], image_url="https://cdn.example.com/sneaker-main.jpg",
            is_main=True, position=2,
        ),
        ProductImage(
            product_id=ids["sneaker"], variant_id=ids["variant_red_42"],
            image_url="https://cdn.example.com/sneaker-red.jpg", position=0,
        ),
        Review(product_id=ids["sneaker"], rating=5),
        Review(product_id=ids["sneaker"], rating=4),
        Review(product_id=ids["sneaker"], rating="great"),
        Review(product_id=ids["sneaker"], rating=None),
        ProductDiscount(
            product_id=ids["ghost"], discount_percent=Decimal("30"), active=True,
            created_at=now - timedelta(minutes=5),
        ),
        ProductDiscount(
            product_id=ids["sneaker"], discount_percent=Decimal("25"), active=True,
            ends_at=now + timedelta(days=2), created_at=now - timedelta(hours=1),
        ),
        ProductDiscount(
            product_id=ids["boot"], discount_percent=Decimal("10"), active=True,
            ends_at=now - timedelta(days=1), created_at=now - timedelta(hours=2),
        ),
        ProductDiscount(
            product_id=ids["sandal"], discount_percent=Decimal("50"), active=False,
            created_at=now - timedelta(hours=3),
        ),
        Promotion(
            id=ids["summer"], title="Summer Sale", discount_percent=20, active=True,
            starts_at=now - timedelta(days=1), ends_at=now + timedelta(hours=1),
            created_at=now - timedelta(days=1),
        ),
        Promotion(
            id=ids["winter"], title="Winter Clearance", discount_percent=30, active=True,
            created_at=now - timedelta(days=2),
        ),
        Promotion(
            id=ids["expired"], title="Spring Sale", discount_percent=40, active=True,
            ends_at=now - timedelta(hours=1), created_at=now - timedelta(days=3),
        ),
        Promotion(
            id=ids["upcoming"], title="Autumn Sale", discount_percent=50, active=True,
            starts_at=now + timedelta(hours=1), ends_at=now + timedelta(days=3),
            created_at=now - timedelta(days=4),
        ),
        Promotion(
            id=ids["disabled"], title="Hidden Sale", discount_percent=60, active=False,
            ends_at=now + timedelta(days=1), created_at=now - timedelta(days=5),
        ),
    ]

    async with session_factory() as session:
        session.add_all(rows)
        await session.commit()

    return ids
