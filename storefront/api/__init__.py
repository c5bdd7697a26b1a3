"""
API module for the storefront.

Provides REST endpoints over the cart and catalog engines for the UI.
"""
from storefront.api.models import (
    AddItemRequest,
    CartResponse,
    CouponRequest,
    SearchRequest,
    SearchResponse,
    UpdateQuantityRequest,
)

__all__ = [
    "AddItemRequest",
    "CartResponse",
    "CouponRequest",
    "SearchRequest",
    "SearchResponse",
    "UpdateQuantityRequest",
]
