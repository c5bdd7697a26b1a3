"""
Sort options for the shop listing.

Each option binds one product field to a key function and a direction.
"relevance" keeps the input order. Sorting is stable in both directions, so
products that compare equal stay in catalog order.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence

from storefront.catalog.models import ProductRecord

SortKey = Callable[[ProductRecord], Any]


def _text_key(field_name: str) -> SortKey:
    # Case-folded first so "apple" and "Banana" order like a locale collation would
    def key(product: ProductRecord) -> Any:
        value = getattr(product, field_name) or ""
        return (value.casefold(), value)
    return key


def _number_key(field_name: str) -> SortKey:
    def key(product: ProductRecord) -> Any:
        return getattr(product, field_name) or 0
    return key


def _flag_key(field_name: str) -> SortKey:
    def key(product: ProductRecord) -> Any:
        return 1 if getattr(product, field_name) else 0
    return key


@dataclass(frozen=True)
class SortOption:
    value: str
    label: str
    field: Optional[str]
    direction: str  # "asc" | "desc"
    key: Optional[SortKey] = None

    @property
    def reorders(self) -> bool:
        return self.key is not None

    def apply(self, products: Sequence[ProductRecord]) -> List[ProductRecord]:
        if self.key is None:
            return list(products)
        return sorted(products, key=self.key, reverse=self.direction == "desc")


SORT_OPTIONS: List[SortOption] = [
    SortOption("relevance", "Relevance", None, "desc"),
    SortOption("newest", "Newest First", "is_new", "desc", _flag_key("is_new")),
    SortOption("price-low", "Price: Low to High", "price", "asc", _number_key("price")),
    SortOption("price-high", "Price: High to Low", "price", "desc", _number_key("price")),
    SortOption("name-asc", "Name: A to Z", "name", "asc", _text_key("name")),
    SortOption("name-desc", "Name: Z to A", "name", "desc", _text_key("name")),
    SortOption("popularity", "Most Popular", "is_best_seller", "desc", _flag_key("is_best_seller")),
]

SORTS_BY_VALUE: Dict[str, SortOption] = {option.value: option for option in SORT_OPTIONS}

DEFAULT_SORT = "relevance"


def get_sort_option(value: str) -> SortOption:
    """Look up a sort option; raises ValueError for unknown keys."""
    try:
        return SORTS_BY_VALUE[value]
    except KeyError:
        raise ValueError(f"Unknown sort option: {value!r}. Expected one of {list(SORTS_BY_VALUE)}") from None


def sort_products(products: Sequence[ProductRecord], sort_value: str) -> List[ProductRecord]:
    return get_sort_option(sort_value).apply(products)
