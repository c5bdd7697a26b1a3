"""
Catalog listing: product records, filters, sort options and the paginating engine.
"""
from storefront.catalog.engine import CatalogEngine, CatalogPage, get_price_range, get_unique_values
from storefront.catalog.filters import FilterState, apply_filters, matches_filters
from storefront.catalog.models import PLACEHOLDER_IMAGE, ProductRecord
from storefront.catalog.product_source import (
    JsonProductSource,
    ProductSource,
    ProductSourceError,
    StaticProductSource,
    get_product,
)
from storefront.catalog.sorting import SORT_OPTIONS, SortOption, get_sort_option, sort_products

__all__ = [
    "CatalogEngine",
    "CatalogPage",
    "FilterState",
    "ProductRecord",
    "PLACEHOLDER_IMAGE",
    "ProductSource",
    "ProductSourceError",
    "StaticProductSource",
    "JsonProductSource",
    "SORT_OPTIONS",
    "SortOption",
    "apply_filters",
    "matches_filters",
    "get_price_range",
    "get_unique_values",
    "get_product",
    "get_sort_option",
    "sort_products",
]
