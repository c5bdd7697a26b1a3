"""
WhatsApp click-to-chat helpers: product enquiries and cart order summaries.

Messages are returned URL-encoded, ready to append as ``?text=``.
"""
from __future__ import annotations

import re
from typing import Iterable, Optional
from urllib.parse import quote

from storefront.cart.models import CartLineItem, CartTotals
from storefront.utils.currency import format_price


def _encode(text: str) -> str:
    # Same character set as JavaScript's encodeURIComponent
    return quote(text, safe="-_.!~*'()")


def build_product_enquiry_message(product_name: str, price: int, currency: str = "NGN") -> str:
    message = (
        f"Hi! I'm interested in the {product_name} ({format_price(price, currency)}). "
        "Can you tell me more about availability and delivery?"
    )
    return _encode(message)


def build_cart_message(items: Iterable[CartLineItem], totals: CartTotals, currency: str = "NGN") -> str:
    """Order summary listing each line with its variant, quantity and line total."""
    lines = ["Hello! I would like to place an order with the following items:", ""]
    items = list(items)
    if not items:
        lines.append("- (Cart is empty)")
    for item in items:
        variant_bits = []
        if item.color:
            variant_bits.append(f"Color: {item.color}")
        if item.size:
            variant_bits.append(f"Size: {item.size}")
        variant = f" ({', '.join(variant_bits)})" if variant_bits else ""
        lines.append(f"• {item.name}{variant} × {item.quantity} — {format_price(item.line_total, currency)}")

    shipping = "FREE" if totals.shipping == 0 else format_price(totals.shipping, currency)
    lines.extend([
        "",
        f"Subtotal: {format_price(totals.subtotal, currency)}",
        f"Tax: {format_price(totals.tax, currency)}",
        f"Shipping: {shipping}",
        f"Total: {format_price(totals.total, currency)}",
        "",
        "Please advise on payment and delivery options. Thank you!",
    ])
    return _encode("\n".join(lines))


def whatsapp_url(phone: str, message: Optional[str] = None) -> str:
    """wa.me link for ``phone`` (non-digits stripped) with an optional pre-encoded message."""
    digits = re.sub(r"\D", "", phone or "")
    base_url = f"https://wa.me/{digits}"
    return f"{base_url}?text={message}" if message else base_url
