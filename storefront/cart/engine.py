"""
Cart pricing engine.

Owns the line items of one shopping session and at most one applied coupon.
Every mutation recomputes the totals synchronously and then hands the new
state to the persistence hook, so after any call returns ``totals`` already
reflects it.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from storefront.cart.coupons import CouponLookup, StaticCouponTable
from storefront.cart.models import CartLineItem, CartSnapshot, CartTotals, Coupon, LineKey, line_key
from storefront.cart.persistence import CartPersistence, CartPersistenceError
from storefront.cart.pricing import calculate_totals
from storefront.core.config import StorefrontConfig
from storefront.utils.logger import get_logger

logger = get_logger("cart.engine")


class CartEngine:
    """
    Cart state for a single session.

    Collaborators are injected: ``coupons`` answers code lookups,
    ``persistence`` (optional) receives a snapshot after every mutation.
    """

    def __init__(
        self,
        config: Optional[StorefrontConfig] = None,
        coupons: Optional[CouponLookup] = None,
        persistence: Optional[CartPersistence] = None,
        session_id: str = "default",
    ):
        self.config = config or StorefrontConfig()
        self.coupons = coupons or StaticCouponTable.from_config(self.config)
        self.persistence = persistence
        self.session_id = session_id

        self._lines: Dict[LineKey, CartLineItem] = {}
        self.applied_coupon: Optional[Coupon] = None
        self.totals = CartTotals()

    # ── Read model ────────────────────────────────────────────────────────

    @property
    def items(self) -> List[CartLineItem]:
        """Lines in insertion order."""
        return list(self._lines.values())

    @property
    def subtotal(self) -> int:
        return self.totals.subtotal

    @property
    def tax(self) -> int:
        return self.totals.tax

    @property
    def shipping(self) -> int:
        return self.totals.shipping

    @property
    def total(self) -> int:
        return self.totals.total

    @property
    def item_count(self) -> int:
        return sum(item.quantity for item in self._lines.values())

    @property
    def is_empty(self) -> bool:
        return not self._lines

    @property
    def has_coupon(self) -> bool:
        return self.applied_coupon is not None

    def get_item(self, product_id: str, color: Optional[str] = None, size: Optional[str] = None) -> Optional[CartLineItem]:
        return self._lines.get(line_key(product_id, color, size))

    def snapshot(self) -> CartSnapshot:
        return CartSnapshot(items=self.items, applied_coupon=self.applied_coupon)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "session_id": self.session_id,
            "items": [item.to_dict() for item in self.items],
            "applied_coupon": self.applied_coupon.to_dict() if self.applied_coupon else None,
            "item_count": self.item_count,
            **self.totals.to_dict(),
        }

    # ── Line management ───────────────────────────────────────────────────

    def _cap(self, item: CartLineItem) -> int:
        return item.max_quantity or self.config.default_max_quantity

    def add_item(self, item: CartLineItem, quantity: Optional[int] = None) -> None:
        """
        Add ``quantity`` (default: the item's own quantity, else 1) of a product/color/size.

        An existing line with the same composite key is merged by addition and
        clamped to the line's cap. Quantities below 1 are ignored.
        """
        qty = quantity if quantity is not None else (item.quantity or 1)
        if qty < 1:
            logger.debug("Ignoring add_item for %s with quantity %s", item.product_id, qty)
            return

        existing = self._lines.get(item.key)
        if existing is not None:
            existing.quantity = min(existing.quantity + qty, self._cap(existing))
        else:
            line = CartLineItem.from_dict(item.to_dict())
            line.quantity = min(qty, self._cap(line))
            self._lines[line.key] = line

        logger.debug("add_item %s -> quantity %s", item.key, self._lines[item.key].quantity)
        self._commit()

    def remove_item(self, product_id: str, color: Optional[str] = None, size: Optional[str] = None) -> None:
        """Drop the matching line; removing a line that is not in the cart changes nothing."""
        key = line_key(product_id, color, size)
        if key not in self._lines:
            logger.debug("remove_item %s: not in cart", key)
            return
        del self._lines[key]
        logger.debug("remove_item %s", key)
        self._commit()

    def update_quantity(
        self,
        product_id: str,
        quantity: int,
        color: Optional[str] = None,
        size: Optional[str] = None,
    ) -> None:
        """Set a line's quantity (clamped to its cap); 0 or less removes the line."""
        if quantity <= 0:
            self.remove_item(product_id, color, size)
            return

        line = self._lines.get(line_key(product_id, color, size))
        if line is None:
            logger.debug("update_quantity %s: not in cart", line_key(product_id, color, size))
            return
        line.quantity = min(quantity, self._cap(line))
        self._commit()

    def clear_cart(self) -> None:
        """Empty the cart and drop the coupon."""
        self._lines.clear()
        self.applied_coupon = None
        logger.debug("clear_cart session=%s", self.session_id)
        self._commit()

    # ── Coupons ───────────────────────────────────────────────────────────

    def apply_coupon(self, code: str) -> bool:
        """
        Apply a coupon code, replacing any coupon already applied.

        Returns False (and leaves the cart untouched) when the code is unknown.
        """
        coupon = self.coupons.lookup_coupon(code)
        if coupon is None:
            logger.info("Rejected coupon %r for session=%s", code, self.session_id)
            return False
        self.applied_coupon = coupon
        logger.info("Applied coupon %s for session=%s", coupon.code, self.session_id)
        self._commit()
        return True

    def remove_coupon(self) -> None:
        self.applied_coupon = None
        self._commit()

    # ── Totals & persistence ──────────────────────────────────────────────

    def calculate_totals(self) -> CartTotals:
        """Recompute totals from the current lines and coupon."""
        self.totals = calculate_totals(self._lines.values(), self.applied_coupon, self.config)
        return self.totals

    def load_cart(self) -> None:
        """Restore lines and coupon from the persistence hook (cold start)."""
        if self.persistence is None:
            self.calculate_totals()
            return
        try:
            snapshot = self.persistence.load_cart(self.session_id)
        except CartPersistenceError as e:
            logger.warning("Starting with an empty cart for session=%s: %s", self.session_id, e)
            snapshot = None
        if snapshot is not None:
            self._lines = {}
            for item in snapshot.items:
                if item.quantity < 1:
                    continue
                item.quantity = min(item.quantity, self._cap(item))
                self._lines[item.key] = item
            self.applied_coupon = snapshot.applied_coupon
            logger.debug("Loaded %d cart lines for session=%s", len(self._lines), self.session_id)
        self.calculate_totals()

    def save_cart(self) -> None:
        if self.persistence is None:
            return
        try:
            self.persistence.save_cart(self.session_id, self.snapshot())
        except CartPersistenceError as e:
            # In-memory state stays authoritative; the next mutation retries the save.
            logger.warning("Cart not persisted for session=%s: %s", self.session_id, e)

    def _commit(self) -> None:
        self.calculate_totals()
        self.save_cart()
