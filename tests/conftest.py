"""Pytest configuration for storefront tests."""

import pytest

from storefront.cart.engine import CartEngine
from storefront.cart.models import CartLineItem
from storefront.cart.persistence import InMemoryCartStore
from storefront.catalog.engine import CatalogEngine
from storefront.catalog.product_source import StaticProductSource
from storefront.core.config import StorefrontConfig, set_config


# ---------------------------------------------------------------------------
# Catalog fixture data: 12 products across two categories with mixed flags,
# sale prices, size lists (absent, empty and populated) and colors.
# ---------------------------------------------------------------------------

CATALOG = [
    {"id": "tote-black", "name": "Luxury Leather Tote", "price": 45000, "originalPrice": 55000,
     "category": "Bags", "subcategory": "Totes", "description": "Premium Italian leather tote.",
     "colors": ["Black", "Cognac"], "materials": ["Italian Leather", "Brass Hardware"],
     "isNew": True, "maxQuantity": 3, "rating": 4.8, "reviewCount": 124,
     "tags": ["luxury", "leather", "tote"]},
    {"id": "clutch-gold", "name": "elegant Evening Clutch", "price": 25000,
     "category": "Bags", "subcategory": "Clutches", "description": "Evening clutch.",
     "colors": ["Gold", "Champagne"], "materials": ["Metallic Leather"],
     "isBestSeller": True, "rating": 4.6, "reviewCount": 89, "tags": ["evening", "clutch"]},
    {"id": "handbag-brown", "name": "Classic Handbag", "price": 38000,
     "category": "Bags", "subcategory": "Handbags", "description": "Timeless design.",
     "colors": ["Brown"], "materials": ["Genuine Leather"], "rating": 4.7, "reviewCount": 67},
    {"id": "slippers-beige", "name": "Comfort Slippers", "price": 18000,
     "category": "Shoes", "subcategory": "Slippers", "description": "Soft leather slippers.",
     "colors": ["Beige", "Tan"], "materials": ["Soft Leather", "Rubber Sole"],
     "sizes": ["36", "37", "38"], "isNew": True, "rating": 4.5, "reviewCount": 43},
    {"id": "heels-red", "name": "Owambe Statement Heels", "price": 32000,
     "category": "Shoes", "subcategory": "Owambe", "description": "Red shoes for the party.",
     "colors": ["Red"], "materials": ["Patent Leather"], "sizes": ["38", "39", "40"],
     "isBestSeller": True, "rating": 4.9, "reviewCount": 156, "tags": ["owambe", "heels", "party"]},
    {"id": "pumps-black", "name": "Office Pumps", "price": 28000,
     "category": "Shoes", "subcategory": "Office", "description": "Professional pumps.",
     "colors": ["Black"], "materials": ["Leather Upper"], "sizes": ["39", "40"],
     "rating": 4.6, "reviewCount": 89},
    {"id": "crossbody-tan", "name": "Mini Crossbody", "price": 22000,
     "category": "Bags", "subcategory": "Handbags", "description": "Compact crossbody bag.",
     "colors": ["Tan"], "materials": ["Genuine Leather"], "rating": 4.4, "reviewCount": 52},
    {"id": "tote-navy", "name": "Weekend Tote", "price": 35000,
     "category": "Bags", "subcategory": "Totes", "description": "Spacious canvas tote.",
     "colors": ["Navy"], "materials": ["Canvas"], "rating": 4.5, "reviewCount": 78},
    {"id": "flats-white", "name": "Ballet Flats", "price": 15000, "originalPrice": 15000,
     "category": "Shoes", "subcategory": "Slippers", "description": "Classic flats.",
     "colors": ["White"], "materials": ["Leather Upper"], "sizes": [],
     "images": ["", "  "], "rating": 4.3, "reviewCount": 3},
    {"id": "clutch-silver", "name": "Silver Clutch", "price": 26000, "originalPrice": 30000,
     "category": "Bags", "subcategory": "Clutches", "description": "Shimmering clutch.",
     "colors": ["Silver"], "materials": ["Metallic Leather", "Satin Lining"],
     "rating": 4.7, "reviewCount": 61, "tags": ["evening", "clutch", "party"]},
    {"id": "briefcase-black", "name": "Professional Briefcase", "price": 55000,
     "category": "Bags", "subcategory": "Totes", "description": "For the modern professional.",
     "colors": ["Black"], "materials": ["Full Grain Leather"], "isNew": True,
     "rating": 4.8, "reviewCount": 34},
    {"id": "heels-gold", "name": "Party Gold Heels", "price": 30000,
     "category": "Shoes", "subcategory": "Owambe", "description": "Gold heels.",
     "colors": ["Gold"], "materials": ["Metallic Leather"], "sizes": ["37", "38"],
     "isOutOfStock": True, "stock": 0, "rating": 3.9, "reviewCount": 127},
]


@pytest.fixture(autouse=True)
def _reset_global_config():
    """Never let one test's global config leak into the next."""
    set_config(None)
    yield
    set_config(None)


@pytest.fixture
def config():
    return StorefrontConfig(database_url="")


@pytest.fixture
def products():
    return StaticProductSource(CATALOG).list_products()


@pytest.fixture
def product_source():
    return StaticProductSource(CATALOG)


@pytest.fixture
def store():
    return InMemoryCartStore()


@pytest.fixture
def cart(config, store):
    return CartEngine(config=config, persistence=store, session_id="test-session")


@pytest.fixture
def catalog(config):
    return CatalogEngine(config)


def make_item(product_id="a", price=10000, quantity=1, **kwargs):
    """Cart line with sensible defaults for pricing tests."""
    return CartLineItem(
        product_id=product_id,
        name=kwargs.pop("name", f"Product {product_id}"),
        price=price,
        quantity=quantity,
        **kwargs,
    )
