"""
Cart pricing arithmetic.

    subtotal            = Σ price × quantity
    discount            = subtotal × pct/100            (percentage coupon)
                          min(amount, subtotal)         (fixed coupon)
    discounted_subtotal = max(0, subtotal − discount)
    shipping            = 0 if discounted_subtotal >= threshold else flat fee
    tax                 = round(discounted_subtotal × tax_rate)
    total               = round(discounted_subtotal + unrounded tax + shipping)

An empty cart has all-zero totals (no shipping fee on nothing).

All arithmetic is done on Decimals so half-unit results round half-up
(1687.5 -> 1688) independently of binary float representation.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Iterable, Optional

from storefront.cart.models import CartLineItem, CartTotals, Coupon
from storefront.core.config import StorefrontConfig
from storefront.utils.currency import Number, round_half_up, to_decimal

TAX_RATE = 0.075
FREE_SHIPPING_THRESHOLD = 50000
STANDARD_SHIPPING = 2500


def calculate_subtotal(items: Iterable[CartLineItem]) -> int:
    return sum(item.price * item.quantity for item in items)


def calculate_discount(subtotal: Number, coupon: Optional[Coupon]) -> Decimal:
    """Discount amount for ``coupon``; never more than the subtotal."""
    if coupon is None:
        return Decimal(0)
    base = to_decimal(subtotal)
    if coupon.type == "percentage":
        discount = base * to_decimal(coupon.discount) / Decimal(100)
    else:
        discount = to_decimal(coupon.discount)
    return max(Decimal(0), min(discount, base))


def calculate_shipping(
    discounted_subtotal: Number,
    threshold: int = FREE_SHIPPING_THRESHOLD,
    flat_fee: int = STANDARD_SHIPPING,
) -> int:
    """Free at or above the threshold, flat fee below it."""
    return 0 if to_decimal(discounted_subtotal) >= threshold else flat_fee


def calculate_tax(discounted_subtotal: Number, tax_rate: float = TAX_RATE) -> Decimal:
    """Unrounded tax on the discounted subtotal."""
    return to_decimal(discounted_subtotal) * to_decimal(tax_rate)


def calculate_totals(
    items: Iterable[CartLineItem],
    coupon: Optional[Coupon] = None,
    config: Optional[StorefrontConfig] = None,
) -> CartTotals:
    """Compute every derived cart figure from the lines and the applied coupon."""
    tax_rate = config.tax_rate if config else TAX_RATE
    threshold = config.free_shipping_threshold if config else FREE_SHIPPING_THRESHOLD
    flat_fee = config.standard_shipping if config else STANDARD_SHIPPING

    items = list(items)
    if not items:
        # Nothing to ship or tax: an empty cart prices to all zeros
        return CartTotals()

    subtotal = calculate_subtotal(items)
    discount = calculate_discount(subtotal, coupon)
    discounted = max(Decimal(0), Decimal(subtotal) - discount)
    shipping = calculate_shipping(discounted, threshold, flat_fee)
    raw_tax = calculate_tax(discounted, tax_rate)

    return CartTotals(
        subtotal=subtotal,
        discount_amount=float(discount),
        discounted_subtotal=float(discounted),
        shipping=shipping,
        tax=round_half_up(raw_tax),
        total=round_half_up(discounted + raw_tax + shipping),
    )
