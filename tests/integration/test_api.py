"""
Integration Tests - HTTP API
"""
from decimal import Decimal

from httpx import ASGITransport, AsyncClient

from storefront.config import get_settings
from storefront.database.connection import get_db_dependency
from storefront.database.models import Product
from storefront.main import app
from tests.fakes import SlowSession


class TestProductListings:
    """Tests for /api/v1/products listings"""

    async def test_top(self, client):
        response = await client.get("/api/v1/products/top")

        assert response.status_code == 200
        products = response.json()["products"]
        assert [p["slug"] for p in products] == ["boot", "sneaker", "sandal"]

        sneaker = products[1]
        assert sneaker["final_price"] == 75.0
        assert sneaker["savings"] == 25.0
        assert sneaker["has_discount"] is True
        assert sneaker["category_slug"] == "shoes"
        assert sneaker["rating"] == 4.5
        assert sneaker["review_count"] == 2
        assert sneaker["currency"] == "TND"

    async def test_top_limit(self, client):
        response = await client.get("/api/v1/products/top", params={"limit": 2})

        assert [p["slug"] for p in response.json()["products"]] == ["boot", "sneaker"]

    async def test_promo_ordered_by_discount_recency(self, client):
        """Test the deleted product behind the newest discount is skipped"""
        response = await client.get("/api/v1/products/promo")

        assert response.status_code == 200
        products = response.json()["products"]
        assert [p["slug"] for p in products] == ["sneaker", "boot"]
        assert all(p["has_discount"] for p in products)
        assert products[1]["final_price"] == 180.0

    async def test_promo_gated_by_window(self, client, monkeypatch):
        monkeypatch.setattr(get_settings().catalog, "gate_discounts_by_window", True)

        response = await client.get("/api/v1/products/promo")

        assert [p["slug"] for p in response.json()["products"]] == ["sneaker"]

    async def test_list_filters(self, client):
        by_category = await client.get("/api/v1/products", params={"category": "shoes"})
        by_search = await client.get("/api/v1/products", params={"search": "boo"})
        paged = await client.get("/api/v1/products", params={"page": 2, "page_size": 2})

        assert [p["slug"] for p in by_category.json()["products"]] == ["sneaker"]
        assert [p["slug"] for p in by_search.json()["products"]] == ["boot"]
        assert [p["slug"] for p in paged.json()["products"]] == ["sneaker"]

    async def test_localized_listing(self, client):
        response = await client.get("/api/v1/products", params={"category": "shoes", "locale": "ar"})

        assert response.json()["products"][0]["name"] == "حذاء رياضي"

    async def test_store_failure_degrades_to_empty(self, broken_client):
        """Test listings answer 200 with no products when the store is down"""
        for path in ("/api/v1/products/top", "/api/v1/products/promo", "/api/v1/products"):
            response = await broken_client.get(path)

            assert response.status_code == 200
            assert response.json() == {"products": []}

    async def test_timeout_degrades_to_empty(self, monkeypatch):
        """Test a hung store is cut off and the listing still answers"""
        monkeypatch.setattr(get_settings().database, "query_timeout", 0.05)

        async def _get_db():
            yield SlowSession()

        app.dependency_overrides[get_db_dependency] = _get_db
        try:
            async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
                response = await c.get("/api/v1/products/top")
        finally:
            app.dependency_overrides.clear()

        assert response.status_code == 200
        assert response.json() == {"products": []}


class TestProductDetail:
    """Tests for /api/v1/products/{slug}"""

    async def test_detail(self, client, seeded_catalog):
        response = await client.get("/api/v1/products/sneaker")

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True

        data = body["data"]
        assert data["final_price"] == 75.0
        assert data["description"] == "Everyday sneaker"
        assert [img["url"] for img in data["images"]] == [
            "https://cdn.example.com/sneaker-side.jpg",
            "https://cdn.example.com/sneaker-main.jpg",
        ]
        assert data["images"][0]["alt"] == "Sneaker"

        assert len(data["variants"]) == 1
        variant = data["variants"][0]
        assert variant["id"] == str(seeded_catalog["variant_red_42"])
        assert variant["sku"] == "SNK-RED-42"
        assert variant["size"] == "42"
        assert variant["color"] == "Red"
        assert variant["color_hex"] == "#FF0000"
        assert variant["price"] == 100.0
        assert variant["image_url"] == "https://cdn.example.com/sneaker-red.jpg"

    async def test_listing_paths_win_over_slugs(self, client, session_factory):
        """Test a product slugged like a listing path is served by the listing"""
        async with session_factory() as session:
            session.add(Product(name="Top Hat", slug="top", base_price=Decimal("30"), status="active", sold_count=1))
            await session.commit()

        response = await client.get("/api/v1/products/top")

        assert response.status_code == 200
        assert "success" not in response.json()
        assert [p["slug"] for p in response.json()["products"]] == ["boot", "sneaker", "sandal", "top"]

    async def test_hidden_product_not_found(self, client):
        """Test deleted and draft products are not served"""
        for slug in ("ghost", "draft", "missing"):
            response = await client.get(f"/api/v1/products/{slug}")

            assert response.status_code == 404
            assert response.json() == {"success": False, "error": "Product not found"}


class TestPromotions:
    """Tests for promotion and discount endpoints"""

    async def test_active_banner(self, client, seeded_catalog):
        """Test the running countdown beats the bigger open-ended promotion"""
        response = await client.get("/api/v1/promotions/active")

        assert response.status_code == 200
        body = response.json()
        assert body["promotion"]["id"] == str(seeded_catalog["summer"])
        assert body["display_banner"] is True
        assert body["countdown_ends_at"] is not None

    async def test_active_banner_without_store(self, broken_client):
        response = await broken_client.get("/api/v1/promotions/active")

        assert response.status_code == 200
        assert response.json()["promotion"] is None
        assert response.json()["display_banner"] is False

    async def test_list_promotions(self, client):
        response = await client.get("/api/v1/promotions")

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert len(body["data"]) == 5

    async def test_list_discounts(self, client):
        response = await client.get("/api/v1/discounts")

        assert response.status_code == 200
        assert len(response.json()["data"]) == 4

    async def test_admin_reads_fail_loudly(self, broken_client):
        """Test admin-style endpoints surface store failures as 5xx"""
        for path in ("/api/v1/promotions", "/api/v1/discounts", "/api/v1/categories"):
            response = await broken_client.get(path)

            assert response.status_code == 500
            assert response.json()["success"] is False
            assert response.json()["error"]


class TestReferenceData:
    """Tests for categories, colors, sizes and variants"""

    async def test_categories(self, client):
        response = await client.get("/api/v1/categories", params={"locale": "fr"})

        assert response.status_code == 200
        assert [c["name"] for c in response.json()["data"]] == ["Chaussures"]

    async def test_colors_and_sizes(self, client):
        colors = await client.get("/api/v1/colors")
        sizes = await client.get("/api/v1/sizes")

        assert [c["name"] for c in colors.json()["data"]] == ["Red"]
        assert [s["name"] for s in sizes.json()["data"]] == ["42"]

    async def test_variants(self, client, seeded_catalog):
        response = await client.get("/api/v1/variants", params={"product_id": str(seeded_catalog["sneaker"])})

        assert response.status_code == 200
        data = response.json()["data"]
        assert [v["sku"] for v in data] == ["SNK-RED-42"]
        assert data[0]["size"]["name"] == "42"

    async def test_variants_requires_product_id(self, client):
        response = await client.get("/api/v1/variants")

        assert response.status_code == 400
        assert response.json() == {"success": False, "error": "Product ID is required"}

    async def test_variants_invalid_product_id(self, client):
        response = await client.get("/api/v1/variants", params={"product_id": "nope"})

        assert response.status_code == 400
        assert response.json()["success"] is False


class TestHealth:
    """Tests for health endpoints"""

    async def test_liveness(self, client):
        response = await client.get("/api/v1/health/live")

        assert response.status_code == 200
        assert response.json() == {"status": "alive"}

    async def test_info(self, client):
        response = await client.get("/api/v1/info")

        assert response.json()["currency"] == "TND"
