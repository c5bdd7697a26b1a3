"""
Cart data types: line items, coupons, derived totals and persisted snapshots.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional, Tuple

DEFAULT_VARIANT = "default"

LineKey = Tuple[str, str, str]


def line_key(product_id: str, color: Optional[str] = None, size: Optional[str] = None) -> LineKey:
    """Composite key of a cart line; a missing color/size counts as "default"."""
    return (str(product_id), color or DEFAULT_VARIANT, size or DEFAULT_VARIANT)


@dataclass
class CartLineItem:
    """One product/color/size entry in the cart. Quantity is always >= 1 while the line exists."""
    product_id: str
    name: str
    price: int
    quantity: int = 1
    color: Optional[str] = None
    size: Optional[str] = None
    max_quantity: Optional[int] = None

    # Display metadata, not used in pricing
    image: Optional[str] = None
    category: str = ""
    subcategory: str = ""
    original_price: Optional[int] = None
    in_stock: bool = True
    is_pre_order: bool = False
    estimated_delivery: Optional[str] = None

    @property
    def key(self) -> LineKey:
        return line_key(self.product_id, self.color, self.size)

    @property
    def line_total(self) -> int:
        return self.price * self.quantity

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CartLineItem":
        known = {name for name in cls.__dataclass_fields__}
        return cls(**{k: v for k, v in data.items() if k in known})


@dataclass(frozen=True)
class Coupon:
    """A discount code. ``discount`` is a percent (0-100) or a whole-unit amount depending on type."""
    code: str
    discount: float
    type: str  # "percentage" | "fixed"

    def to_dict(self) -> Dict[str, Any]:
        return {"code": self.code, "discount": self.discount, "type": self.type}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Coupon":
        return cls(code=str(data["code"]).upper(), discount=data["discount"], type=data["type"])


@dataclass(frozen=True)
class CartTotals:
    """Derived cart figures. Never mutated; recomputed after every cart change."""
    subtotal: int = 0
    discount_amount: float = 0.0
    discounted_subtotal: float = 0.0
    shipping: int = 0
    tax: int = 0
    total: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class CartSnapshot:
    """What gets handed to the persistence hook: the lines and the applied coupon."""
    items: List[CartLineItem] = field(default_factory=list)
    applied_coupon: Optional[Coupon] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "items": [item.to_dict() for item in self.items],
            "applied_coupon": self.applied_coupon.to_dict() if self.applied_coupon else None,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CartSnapshot":
        coupon = data.get("applied_coupon")
        return cls(
            items=[CartLineItem.from_dict(item) for item in data.get("items") or []],
            applied_coupon=Coupon.from_dict(coupon) if coupon else None,
        )
