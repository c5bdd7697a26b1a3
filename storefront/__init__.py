"""
Storefront core - cart pricing and catalog listing engines.

- Cart: line items keyed by product/color/size, one coupon, totals with
  tax and a free-shipping threshold, pluggable persistence
- Catalog: faceted filtering, stable sorting and pagination of a product snapshot
- Recommendations scored over the same snapshot
"""

__version__ = '0.1.0'

from storefront.core.config import StorefrontConfig, get_config, set_config
from storefront.cart.engine import CartEngine
from storefront.catalog.engine import CatalogEngine

__all__ = [
    'CartEngine',
    'CatalogEngine',
    'StorefrontConfig',
    'get_config',
    'set_config',
]
