"""
Money helpers: exact decimal conversion, half-up rounding and price formatting.

Amounts are whole currency units (the storefront prices in Naira, no kobo).
"""
from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Union

Number = Union[int, float, Decimal]

CURRENCY_SYMBOLS = {
    "NGN": "₦",
    "USD": "$",
    "GBP": "£",
    "EUR": "€",
}


def to_decimal(value: Number) -> Decimal:
    """Convert a number to Decimal without picking up binary float noise (0.075 stays 0.075)."""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(repr(value))
    return Decimal(value)


def round_half_up(value: Number) -> int:
    """Round to the nearest whole unit, halves away from zero (1687.5 -> 1688, 22.5 -> 23)."""
    return int(to_decimal(value).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def format_price(amount: Number, currency: str = "NGN") -> str:
    """
    Format an amount with currency symbol, thousands separators and no decimals.

    >>> format_price(45000)
    '₦45,000'
    >>> format_price(-2500)
    '-₦2,500'

    Unknown currency codes are prefixed with the code and a space ("KES 1,200").
    """
    whole = round_half_up(amount)
    code = currency.upper()
    symbol = CURRENCY_SYMBOLS.get(code, f"{code} ")
    sign = "-" if whole < 0 else ""
    return f"{sign}{symbol}{abs(whole):,}"
