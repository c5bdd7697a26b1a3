"""
Product data sources.

The catalog engine never fetches products itself; callers obtain a full
snapshot from a source and pass it to ``CatalogEngine.filter_products``.
"""
from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Protocol, Union

from storefront.catalog.models import PLACEHOLDER_IMAGE, ProductRecord
from storefront.utils.logger import get_logger

logger = get_logger("catalog.product_source")


class ProductSourceError(RuntimeError):
    """Raised when the product catalog cannot be loaded."""


class ProductSource(Protocol):
    def list_products(self) -> List[ProductRecord]:
        ...


def parse_products(raw: Iterable[Dict[str, Any]], placeholder_image: str = PLACEHOLDER_IMAGE) -> List[ProductRecord]:
    """Convert raw catalog dicts to records; a malformed entry fails the whole load."""
    products = []
    for index, entry in enumerate(raw):
        try:
            products.append(ProductRecord.from_dict(entry, placeholder_image=placeholder_image))
        except (KeyError, TypeError, ValueError) as e:
            raise ProductSourceError(f"Malformed product at index {index}: {e!r}") from e
    return products


def get_product(products: Iterable[ProductRecord], product_id: str) -> Optional[ProductRecord]:
    for product in products:
        if product.id == product_id:
            return product
    return None


class StaticProductSource:
    """In-memory catalog (tests, fixtures)."""

    def __init__(self, products: Iterable[Union[ProductRecord, Dict[str, Any]]]):
        records = []
        for p in products:
            records.append(p if isinstance(p, ProductRecord) else ProductRecord.from_dict(p))
        self._products = records

    def list_products(self) -> List[ProductRecord]:
        return list(self._products)


class JsonProductSource:
    """
    Catalog stored as a JSON file: either a list of products or {"products": [...]}.

    The parsed catalog is cached until ``reload()``.
    """

    def __init__(self, path: Union[str, Path], placeholder_image: str = PLACEHOLDER_IMAGE):
        self.path = Path(path)
        self.placeholder_image = placeholder_image
        self._cache: Optional[List[ProductRecord]] = None

    def list_products(self) -> List[ProductRecord]:
        if self._cache is None:
            self._cache = self._load()
        return list(self._cache)

    def reload(self) -> List[ProductRecord]:
        self._cache = None
        return self.list_products()

    def _load(self) -> List[ProductRecord]:
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError as e:
            logger.error("Product catalog not found: %s", self.path)
            raise ProductSourceError(f"Product catalog not found: {self.path}") from e
        except (OSError, json.JSONDecodeError) as e:
            logger.error("Failed to read product catalog %s: %s", self.path, e)
            raise ProductSourceError(f"Failed to read product catalog {self.path}: {e}") from e

        raw = data.get("products") if isinstance(data, dict) else data
        if not isinstance(raw, list):
            raise ProductSourceError(f"Product catalog {self.path} must contain a list of products")

        products = parse_products(raw, self.placeholder_image)
        logger.info("Loaded %d products from %s", len(products), self.path)
        return products
