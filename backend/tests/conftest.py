import os

# must be set before storefront.config is imported
os.environ["DATABASE_URL"] = "sqlite:///./test_storefront.db"
os.environ["RESET_DB"] = "1"
os.environ["CATALOGUE_MOCK_DELAY_MS"] = "0"
os.environ["CATALOGUE_FAILURE_RATE"] = "0"
os.environ["ADMIN_PASSWORD"] = "test-admin"

from datetime import datetime

import pytest
from fastapi.testclient import TestClient

from storefront.adapters.mock_catalogue import (
    CatalogueCorrupt,
    CatalogueUnavailable,
    ProductNotFound,
)
from storefront.main import app
from storefront.schemas.product_schema import Product, ProductStats


class FakeCatalogue:
    """In-memory upstream for store/view unit tests."""

    def __init__(self, products):
        self.products = list(products)
        self.fail_fetch = False
        self.corrupt_fetch = False
        self.fail_update = False
        # when set, pin calls are accepted but fetches keep returning the old flags
        self.stale_fetch = False
        self.fetch_count = 0
        self.pin_calls = []

    def fetch_products(self):
        self.fetch_count += 1
        if self.fail_fetch:
            raise CatalogueUnavailable("catalogue down")
        if self.corrupt_fetch:
            raise CatalogueCorrupt("bad row")
        return list(self.products)

    def _set(self, product_id, pinned, actor):
        if self.fail_update:
            raise CatalogueUnavailable("update rejected")
        if not any(p.id == product_id for p in self.products):
            raise ProductNotFound(product_id)
        self.pin_calls.append((product_id, pinned, actor))
        if not self.stale_fetch:
            self.products = [
                p.model_copy(update={"is_pinned": pinned}) if p.id == product_id else p
                for p in self.products
            ]

    def pin_product(self, product_id, actor=None):
        self._set(product_id, True, actor)

    def unpin_product(self, product_id, actor=None):
        self._set(product_id, False, actor)


def build_product(id, price=10.0, brand="A", category="Serums", views=None, sold=None,
                  created_at=None, is_pinned=False, name=None):
    stats = None
    if views is not None or sold is not None:
        stats = ProductStats(views_last_month=views or 0, volume_sold_last_month=sold or 0)
    return Product(
        id=str(id),
        name=name or f"Product {id}",
        brand=brand,
        category=category,
        price=price,
        is_pinned=is_pinned,
        created_at=created_at or datetime(2023, 1, 1),
        stats=stats,
    )


@pytest.fixture
def make_product():
    return build_product


@pytest.fixture
def sample_products():
    return [
        build_product("1", price=10, brand="A", category="Serums", views=50, sold=5,
                      created_at=datetime(2023, 1, 10)),
        build_product("2", price=5, brand="B", category="Toners", views=200, sold=1,
                      created_at=datetime(2023, 3, 1)),
        build_product("3", price=20, brand="A", category="Toners",
                      created_at=datetime(2023, 2, 1), is_pinned=True),
        build_product("4", price=40, brand="C", category="Masks", views=10, sold=30,
                      created_at=datetime(2022, 12, 1)),
    ]


@pytest.fixture
def fake_catalogue(sample_products):
    return FakeCatalogue(sample_products)


@pytest.fixture(scope="module")
def client():
    with TestClient(app) as c:
        yield c
