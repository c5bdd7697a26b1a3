"""
Catalog filter / sort / paginate engine.

Holds the shop listing state of one session (filters, sort key, page) and
derives the visible page from a full product snapshot:

    filter (AND across facets) -> stable sort -> count -> slice

``filter_products`` writes its results into ``filtered_products``,
``total_results`` and ``total_pages`` for the presentation layer to read.
Every filter or sort change resets the listing to page 1.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, field, fields
from typing import Any, Dict, List, Optional, Sequence, Tuple

from storefront.catalog.filters import FilterState, apply_filters
from storefront.catalog.models import ProductRecord
from storefront.catalog.sorting import DEFAULT_SORT, get_sort_option
from storefront.core.config import StorefrontConfig
from storefront.utils.logger import get_logger

logger = get_logger("catalog.engine")

_FILTER_FIELDS = {f.name for f in fields(FilterState)}


@dataclass
class CatalogPage:
    """Read model of the current listing page."""
    products: List[ProductRecord] = field(default_factory=list)
    total_results: int = 0
    total_pages: int = 0
    current_page: int = 1
    items_per_page: int = 12

    @property
    def has_next(self) -> bool:
        return self.current_page < self.total_pages

    @property
    def has_prev(self) -> bool:
        return self.current_page > 1

    @property
    def is_empty(self) -> bool:
        return not self.products


def get_price_range(products: Sequence[ProductRecord], default_max: int = 100000) -> Tuple[int, int]:
    """(min, max) price of the products, or (0, default_max) when there are none."""
    if not products:
        return (0, default_max)
    prices = [p.price for p in products]
    return (min(prices), max(prices))


def get_unique_values(products: Sequence[ProductRecord], field_name: str) -> List[str]:
    """Sorted distinct string values of a scalar or list-valued product field."""
    values = set()
    for product in products:
        value = getattr(product, field_name, None)
        if isinstance(value, str):
            if value:
                values.add(value)
        elif isinstance(value, (list, tuple)):
            values.update(v for v in value if isinstance(v, str))
    return sorted(values)


class CatalogEngine:
    """Shop listing state for a single session."""

    def __init__(self, config: Optional[StorefrontConfig] = None):
        self.config = config or StorefrontConfig()
        self.filters = FilterState.initial(self.config.default_max_price)
        self.active_sort = DEFAULT_SORT
        self.current_page = 1
        self.items_per_page = self.config.items_per_page

        self.filtered_products: List[ProductRecord] = []
        self.total_pages = 0
        self.total_results = 0

    # ── Filter mutators (each resets to page 1) ───────────────────────────

    def set_filter(self, name: str, value: Any) -> None:
        if name not in _FILTER_FIELDS:
            raise ValueError(f"Unknown filter: {name!r}")
        if name in ("colors", "sizes", "materials"):
            value = list(value or [])
        elif name == "price_range":
            low, high = value
            value = (low, high)
        self.filters = self.filters.copy(**{name: value})
        self.current_page = 1

    def update_price_range(self, min_price: int, max_price: int) -> None:
        self.filters = self.filters.copy(price_range=(min_price, max_price))
        self.current_page = 1

    def _toggle(self, name: str, value: str) -> None:
        selected = list(getattr(self.filters, name))
        if value in selected:
            selected.remove(value)
        else:
            selected.append(value)
        self.filters = self.filters.copy(**{name: selected})
        self.current_page = 1

    def toggle_color(self, color: str) -> None:
        self._toggle("colors", color)

    def toggle_size(self, size: str) -> None:
        self._toggle("sizes", size)

    def toggle_material(self, material: str) -> None:
        self._toggle("materials", material)

    def set_search_query(self, query: str) -> None:
        self.filters = self.filters.copy(search_query=query or "")
        self.current_page = 1

    def reset_filters(self) -> None:
        """Back to defaults, keeping the price ceiling derived from the catalog."""
        max_price = self.filters.max_price
        self.filters = FilterState(max_price=max_price, price_range=(0, self.config.default_max_price))
        self.current_page = 1

    def init_price_bounds(self, products: Sequence[ProductRecord]) -> None:
        """Derive the price ceiling from the full catalog and open the range to it."""
        _, max_price = get_price_range(products, self.config.default_max_price)
        self.filters = self.filters.copy(max_price=max_price, price_range=(0, max_price))
        self.current_page = 1

    # ── Sort & pagination ─────────────────────────────────────────────────

    def set_sort(self, sort_value: str) -> None:
        get_sort_option(sort_value)
        self.active_sort = sort_value
        self.current_page = 1

    def set_page(self, page: int) -> None:
        # Not clamped to total_pages: a page past the end renders as empty
        self.current_page = max(1, int(page))

    def set_items_per_page(self, count: int) -> None:
        if count <= 0:
            raise ValueError(f"items_per_page must be positive, got {count}")
        self.items_per_page = count
        self.current_page = 1

    # ── Derivation ────────────────────────────────────────────────────────

    def filter_products(self, all_products: Sequence[ProductRecord]) -> None:
        """Filter, sort and slice ``all_products`` into the current page."""
        filtered = apply_filters(all_products, self.filters)
        filtered = get_sort_option(self.active_sort).apply(filtered)

        self.total_results = len(filtered)
        self.total_pages = math.ceil(self.total_results / self.items_per_page)
        start = (self.current_page - 1) * self.items_per_page
        self.filtered_products = filtered[start:start + self.items_per_page]

        logger.debug(
            "filter_products: %d/%d matched, sort=%s, page %d/%d",
            self.total_results, len(all_products), self.active_sort, self.current_page, self.total_pages,
        )

    @property
    def view(self) -> CatalogPage:
        return CatalogPage(
            products=list(self.filtered_products),
            total_results=self.total_results,
            total_pages=self.total_pages,
            current_page=self.current_page,
            items_per_page=self.items_per_page,
        )

    def facets(self, products: Sequence[ProductRecord]) -> Dict[str, Any]:
        """Distinct facet values and price bounds for building the filter sidebar."""
        return {
            "categories": get_unique_values(products, "category"),
            "subcategories": get_unique_values(products, "subcategory"),
            "colors": get_unique_values(products, "colors"),
            "sizes": get_unique_values(products, "sizes"),
            "materials": get_unique_values(products, "materials"),
            "price_range": list(get_price_range(products, self.config.default_max_price)),
        }
