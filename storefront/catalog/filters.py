"""
Shop filter state and the product predicate.

Facets combine with AND; the values selected inside one facet combine with
OR. An empty selection leaves that facet unconstrained.
"""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Iterable, List, Optional, Sequence, Tuple

from storefront.catalog.models import ProductRecord

DEFAULT_MAX_PRICE = 100000


@dataclass
class FilterState:
    category: Optional[str] = None
    subcategory: Optional[str] = None

    price_range: Tuple[int, int] = (0, DEFAULT_MAX_PRICE)
    max_price: int = DEFAULT_MAX_PRICE

    colors: List[str] = field(default_factory=list)
    sizes: List[str] = field(default_factory=list)
    materials: List[str] = field(default_factory=list)

    in_stock: bool = False
    on_sale: bool = False
    is_new: bool = False
    is_best_seller: bool = False

    search_query: str = ""

    @classmethod
    def initial(cls, max_price: int = DEFAULT_MAX_PRICE) -> "FilterState":
        return cls(price_range=(0, max_price), max_price=max_price)

    def copy(self, **changes) -> "FilterState":
        """Return a copy with ``changes`` applied; list fields are never shared."""
        clone = replace(
            self,
            colors=list(self.colors),
            sizes=list(self.sizes),
            materials=list(self.materials),
        )
        return replace(clone, **changes) if changes else clone


def _contains_any(selected: Sequence[str], values: Iterable[str]) -> bool:
    """Case-insensitive substring match of any selected value in any product value."""
    lowered = [v.lower() for v in values]
    return any(sel.lower() in value for sel in selected for value in lowered)


def searchable_text(product: ProductRecord) -> str:
    """Lower-cased haystack used by the free-text search."""
    parts = [
        product.name,
        product.description,
        product.category,
        product.subcategory,
        *product.materials,
        *product.tags,
    ]
    return " ".join(parts).lower()


def matches_filters(product: ProductRecord, filters: FilterState) -> bool:
    """True when the product satisfies every active filter."""
    if filters.category and product.category.lower() != filters.category.lower():
        return False

    if filters.subcategory and product.subcategory.lower() != filters.subcategory.lower():
        return False

    low, high = filters.price_range
    if product.price < low or product.price > high:
        return False

    if filters.colors and not _contains_any(filters.colors, product.colors):
        return False

    # Products without sizes are not constrained by the size facet
    if filters.sizes and product.sizes is not None and not any(s in product.sizes for s in filters.sizes):
        return False

    if filters.materials and not _contains_any(filters.materials, product.materials):
        return False

    if filters.in_stock and product.is_out_of_stock:
        return False

    if filters.on_sale and not product.on_sale:
        return False

    if filters.is_new and not product.is_new:
        return False

    if filters.is_best_seller and not product.is_best_seller:
        return False

    # Whole-query substring match, not tokenized: "red shoe" needs that exact run of text
    if filters.search_query:
        if filters.search_query.lower() not in searchable_text(product):
            return False

    return True


def apply_filters(products: Iterable[ProductRecord], filters: FilterState) -> List[ProductRecord]:
    return [p for p in products if matches_filters(p, filters)]
