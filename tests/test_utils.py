"""Tests for money formatting and WhatsApp order messages."""

from decimal import Decimal
from urllib.parse import unquote

import pytest

from conftest import make_item
from storefront.cart.models import CartTotals
from storefront.cart.pricing import calculate_totals
from storefront.cart.whatsapp import build_cart_message, build_product_enquiry_message, whatsapp_url
from storefront.utils.currency import format_price, round_half_up, to_decimal


class TestCurrency:

    @pytest.mark.parametrize("value,expected", [
        (1687.5, 1688),
        (22.5, 23),
        (22.4999, 22),
        (Decimal("0.5"), 1),
        (-2.5, -3),
        (7, 7),
    ])
    def test_round_half_up(self, value, expected):
        assert round_half_up(value) == expected

    def test_to_decimal_avoids_float_noise(self):
        assert to_decimal(0.075) == Decimal("0.075")

    @pytest.mark.parametrize("amount,currency,expected", [
        (45000, "NGN", "₦45,000"),
        (1234567, "NGN", "₦1,234,567"),
        (0, "NGN", "₦0"),
        (-2500, "NGN", "-₦2,500"),
        (1687.5, "NGN", "₦1,688"),
        (99, "usd", "$99"),
        (1200, "KES", "KES 1,200"),
    ])
    def test_format_price(self, amount, currency, expected):
        assert format_price(amount, currency) == expected


class TestWhatsApp:

    def test_product_enquiry(self):
        message = unquote(build_product_enquiry_message("Luxury Leather Tote", 45000))
        assert "Luxury Leather Tote (₦45,000)" in message

    def test_message_is_url_encoded(self):
        encoded = build_product_enquiry_message("Tote & Clutch", 100)
        assert " " not in encoded
        assert "&" not in encoded
        assert "%26" in encoded

    def test_cart_message(self):
        items = [
            make_item("a", 45000, 2, name="Luxury Leather Tote", color="Black"),
            make_item("b", 32000, 1, name="Owambe Heels", color="Red", size="39"),
        ]
        totals = calculate_totals(items)

        message = unquote(build_cart_message(items, totals))

        assert "• Luxury Leather Tote (Color: Black) × 2 — ₦90,000" in message
        assert "• Owambe Heels (Color: Red, Size: 39) × 1 — ₦32,000" in message
        assert "Subtotal: ₦122,000" in message
        assert "Tax: ₦9,150" in message
        assert "Shipping: FREE" in message
        assert "Total: ₦131,150" in message

    def test_cart_message_paid_shipping(self):
        items = [make_item("a", 1000, 1, name="Socks")]
        message = unquote(build_cart_message(items, calculate_totals(items)))
        assert "• Socks × 1 — ₦1,000" in message
        assert "Shipping: ₦2,500" in message

    def test_empty_cart_message(self):
        message = unquote(build_cart_message([], CartTotals()))
        assert "- (Cart is empty)" in message

    def test_url_strips_non_digits(self):
        assert whatsapp_url("+234 906-181-9572") == "https://wa.me/2349061819572"

    def test_url_with_message(self):
        assert whatsapp_url("2349061819572", "Hi%21") == "https://wa.me/2349061819572?text=Hi%21"
