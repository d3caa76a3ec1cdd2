"""Catalog listing and catalog service tests."""

from decimal import Decimal

import pytest

from posadmin.services import catalog_service
from posadmin.services.catalog_service import CatalogError


class TestCatalogRoutes:

    def test_lists_categories(self, client, headers, category):
        resp = client.get("/api/categories", headers=headers)

        assert resp.status_code == 200
        body = resp.get_json()
        assert body["message"] == "Categories retrieved successfully"
        assert [c["name"] for c in body["data"]] == ["Food"]

    def test_lists_products_with_category(self, client, headers, product_a, product_b):
        resp = client.get("/api/products", headers=headers)

        assert resp.status_code == 200
        body = resp.get_json()
        assert body["message"] == "Products retrieved successfully"
        first = body["data"][0]
        assert first["name"] == "Nasi Goreng"
        assert first["price"] == "100.00"
        assert first["category"]["name"] == "Food"
        assert [p["id"] for p in body["data"]] == [product_a.id, product_b.id]

    @pytest.mark.parametrize("path", ["/api/categories", "/api/products"])
    def test_requires_token(self, client, db_session, path):
        assert client.get(path).status_code == 401


class TestCatalogService:

    def test_create_product_quantizes_price(self, category):
        product = catalog_service.create_product(name="Kopi", category_id=category.id, price=18000.5)
        assert product.price == Decimal("18000.50")

    def test_create_product_requires_category(self, db_session):
        with pytest.raises(CatalogError):
            catalog_service.create_product(name="Kopi", category_id=999, price="1.00")

    def test_rejects_negative_price(self, category):
        with pytest.raises(CatalogError):
            catalog_service.create_product(name="Kopi", category_id=category.id, price="-1")

    def test_blank_category_name(self, db_session):
        with pytest.raises(CatalogError):
            catalog_service.create_category("   ")

    def test_update_price(self, product_a):
        updated = catalog_service.update_price(product_a.id, "99.999")
        assert updated.price == Decimal("100.00")

    def test_update_price_unknown_product(self, db_session):
        with pytest.raises(CatalogError):
            catalog_service.update_price(12345, "1.00")
