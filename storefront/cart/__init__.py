"""
Cart pricing: line items, coupons, totals and persistence hooks.
"""
from storefront.cart.coupons import CouponLookup, StaticCouponTable
from storefront.cart.engine import CartEngine
from storefront.cart.models import CartLineItem, CartSnapshot, CartTotals, Coupon, line_key
from storefront.cart.persistence import (
    CartPersistence,
    CartPersistenceError,
    InMemoryCartStore,
    SqlCartStore,
    create_cart_store,
)
from storefront.cart.pricing import calculate_totals

__all__ = [
    "CartEngine",
    "CartLineItem",
    "CartSnapshot",
    "CartTotals",
    "Coupon",
    "CouponLookup",
    "StaticCouponTable",
    "CartPersistence",
    "CartPersistenceError",
    "InMemoryCartStore",
    "SqlCartStore",
    "create_cart_store",
    "calculate_totals",
    "line_key",
]
