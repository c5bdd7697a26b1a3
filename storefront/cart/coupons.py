"""
Coupon / discount code lookup.

Demo coupon codes (the defaults shipped in config/default.yaml):
  WELCOME10:    10% off the subtotal
  FREESHIP:     ₦2,500 off (covers standard shipping)
  NEWCUSTOMER:  15% off the subtotal
  LUXURY20:     20% off the subtotal

The cart engine only depends on the ``CouponLookup`` protocol, so the fixed
table can be replaced by a backend-driven implementation.
"""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional, Protocol

from storefront.cart.models import Coupon
from storefront.core.config import COUPON_TYPES, StorefrontConfig
from storefront.utils.logger import get_logger

logger = get_logger("cart.coupons")


def normalize_code(code: str) -> str:
    """Coupon codes are case-insensitive and stored upper-cased."""
    return (code or "").strip().upper()


class CouponLookup(Protocol):
    def lookup_coupon(self, code: str) -> Optional[Coupon]:
        """Return the coupon for ``code`` or None when the code is unknown."""
        ...


class StaticCouponTable:
    """Fixed in-memory coupon table: CODE -> {"discount": number, "type": "percentage" | "fixed"}."""

    def __init__(self, entries: Mapping[str, Mapping[str, Any]]):
        self._coupons: Dict[str, Coupon] = {}
        for raw_code, entry in entries.items():
            code = normalize_code(raw_code)
            ctype = entry.get("type")
            if ctype not in COUPON_TYPES:
                raise ValueError(f"Coupon {code!r} has unknown type {ctype!r}")
            discount = entry.get("discount", 0)
            if discount < 0:
                raise ValueError(f"Coupon {code!r} has negative discount {discount!r}")
            self._coupons[code] = Coupon(code=code, discount=discount, type=ctype)

    @classmethod
    def from_config(cls, config: StorefrontConfig) -> "StaticCouponTable":
        return cls(config.coupons)

    def lookup_coupon(self, code: str) -> Optional[Coupon]:
        coupon = self._coupons.get(normalize_code(code))
        if coupon is None:
            logger.debug("Coupon lookup miss: %r", code)
        return coupon

    def __contains__(self, code: str) -> bool:
        return normalize_code(code) in self._coupons

    def __len__(self) -> int:
        return len(self._coupons)
