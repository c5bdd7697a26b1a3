"""
Tests for the cart engine: line management, quantity caps, coupons and
the persistence hook.
"""

import pytest

from conftest import make_item
from storefront.cart.coupons import StaticCouponTable
from storefront.cart.engine import CartEngine
from storefront.cart.models import CartSnapshot, Coupon
from storefront.cart.persistence import CartPersistenceError, InMemoryCartStore


class RecordingStore(InMemoryCartStore):
    """In-memory store that counts saves."""

    def __init__(self):
        super().__init__()
        self.saves = 0

    def save_cart(self, session_id, snapshot):
        self.saves += 1
        super().save_cart(session_id, snapshot)


class FailingStore:
    def load_cart(self, session_id):
        raise CartPersistenceError("database is down")

    def save_cart(self, session_id, snapshot):
        raise CartPersistenceError("database is down")


# ========================================================================
# Adding items
# ========================================================================

class TestAddItem:

    def test_new_line(self, cart):
        cart.add_item(make_item("a", 10000), 2)

        assert len(cart.items) == 1
        assert cart.items[0].quantity == 2
        assert cart.subtotal == 20000

    def test_same_key_merges(self, cart):
        cart.add_item(make_item("a", 10000), 2)
        cart.add_item(make_item("a", 10000), 3)

        assert len(cart.items) == 1
        assert cart.items[0].quantity == 5

    def test_variants_are_separate_lines(self, cart):
        cart.add_item(make_item("a", 10000, color="Black", size="38"))
        cart.add_item(make_item("a", 10000, color="Black", size="39"))
        cart.add_item(make_item("a", 10000, color="Gold", size="38"))

        assert len(cart.items) == 3
        assert cart.item_count == 3

    def test_missing_variant_matches_default(self, cart):
        """color=None and an empty color both map to the "default" variant."""
        cart.add_item(make_item("a", 10000, color=None))
        cart.add_item(make_item("a", 10000, color=""))

        assert len(cart.items) == 1
        assert cart.get_item("a").quantity == 2

    def test_clamps_to_default_cap(self, cart):
        cart.add_item(make_item("a", 100), 150)
        assert cart.items[0].quantity == 99

    def test_merge_clamps_to_item_cap(self, cart):
        cart.add_item(make_item("a", 45000, max_quantity=3), 2)
        cart.add_item(make_item("a", 45000, max_quantity=3), 2)
        assert cart.items[0].quantity == 3

    def test_zero_max_quantity_uses_default_cap(self, cart):
        cart.add_item(make_item("a", 100, max_quantity=0), 120)
        assert cart.items[0].quantity == 99

    def test_default_quantity_is_items_own(self, cart):
        cart.add_item(make_item("a", 100, quantity=4))
        assert cart.items[0].quantity == 4

    @pytest.mark.parametrize("quantity", [0, -2])
    def test_non_positive_quantity_is_ignored(self, cart, quantity):
        cart.add_item(make_item("a", 100), quantity)
        assert cart.is_empty
        assert cart.total == 0

    def test_caller_item_is_not_aliased(self, cart):
        item = make_item("a", 100)
        cart.add_item(item, 2)
        item.quantity = 50
        assert cart.items[0].quantity == 2

    def test_totals_current_after_return(self, cart):
        cart.add_item(make_item("a", 10000), 2)
        cart.add_item(make_item("b", 5000), 1)

        assert cart.subtotal == 25000
        assert cart.tax == 1875
        assert cart.shipping == 2500
        assert cart.total == 29375


# ========================================================================
# Removing and updating
# ========================================================================

class TestRemoveAndUpdate:

    def test_add_update_remove_scenario(self, cart):
        cart.add_item(make_item("a", 7000), 2)
        assert cart.subtotal == 14000

        cart.update_quantity("a", 5)
        assert cart.subtotal == 35000

        cart.remove_item("a")
        assert cart.subtotal == 0
        assert cart.items == []

    def test_remove_missing_key_changes_nothing(self, cart, store):
        cart.add_item(make_item("a", 7000, color="Red"), 2)
        cart.apply_coupon("WELCOME10")
        before = (cart.to_dict(), store.load_cart("test-session").to_dict())

        cart.remove_item("a")  # wrong variant
        cart.remove_item("zzz")

        assert (cart.to_dict(), store.load_cart("test-session").to_dict()) == before

    def test_remove_matches_variant(self, cart):
        cart.add_item(make_item("a", 100, color="Red", size="38"))
        cart.add_item(make_item("a", 100, color="Red", size="39"))

        cart.remove_item("a", "Red", "38")

        assert [item.size for item in cart.items] == ["39"]

    @pytest.mark.parametrize("quantity", [0, -1])
    def test_update_non_positive_removes(self, cart, quantity):
        cart.add_item(make_item("a", 100), 3)
        cart.update_quantity("a", quantity)
        assert cart.is_empty

    def test_update_clamps_to_cap(self, cart):
        cart.add_item(make_item("a", 100, max_quantity=5))
        cart.update_quantity("a", 40)
        assert cart.items[0].quantity == 5

    def test_update_missing_line_is_noop(self, cart):
        cart.add_item(make_item("a", 100))
        cart.update_quantity("b", 4)
        assert [item.product_id for item in cart.items] == ["a"]
        assert cart.item_count == 1

    def test_line_order_is_insertion_order(self, cart):
        for pid in ("c", "a", "b"):
            cart.add_item(make_item(pid, 100))
        cart.update_quantity("a", 2)
        assert [item.product_id for item in cart.items] == ["c", "a", "b"]

    def test_clear_cart(self, cart):
        cart.add_item(make_item("a", 60000))
        cart.apply_coupon("LUXURY20")

        cart.clear_cart()

        assert cart.is_empty
        assert not cart.has_coupon
        assert cart.totals.to_dict() == {
            "subtotal": 0, "discount_amount": 0.0, "discounted_subtotal": 0.0,
            "shipping": 0, "tax": 0, "total": 0,
        }

    def test_removing_last_line_zeroes_totals(self, cart):
        cart.add_item(make_item("a", 1000))
        cart.remove_item("a")
        assert cart.shipping == 0
        assert cart.total == 0


# ========================================================================
# Coupons
# ========================================================================

class TestCoupons:

    def test_apply_is_case_insensitive(self, cart):
        cart.add_item(make_item("a", 10000), 2)
        cart.add_item(make_item("b", 5000), 1)

        assert cart.apply_coupon("welcome10") is True
        assert cart.applied_coupon == Coupon("WELCOME10", 10, "percentage")
        assert cart.tax == 1688
        assert cart.total == 26688

    def test_second_coupon_replaces_first(self, cart):
        cart.add_item(make_item("a", 100000))

        assert cart.apply_coupon("WELCOME10")
        assert cart.apply_coupon("LUXURY20")

        assert cart.applied_coupon.code == "LUXURY20"
        assert cart.totals.discount_amount == 20000
        assert cart.totals.discounted_subtotal == 80000
        assert cart.total == 86000  # 80000 + 6000 tax, free shipping

    def test_invalid_code_leaves_state_unchanged(self, cart, store):
        cart.add_item(make_item("a", 10000), 2)
        cart.apply_coupon("WELCOME10")
        before = cart.to_dict()

        assert cart.apply_coupon("NOTREAL") is False
        assert cart.to_dict() == before

    def test_remove_coupon(self, cart):
        cart.add_item(make_item("a", 10000))
        cart.apply_coupon("FREESHIP")
        cart.remove_coupon()

        assert cart.applied_coupon is None
        assert cart.total == 10000 + 750 + 2500

    def test_coupon_survives_line_changes(self, cart):
        cart.apply_coupon("WELCOME10")
        cart.add_item(make_item("a", 10000))
        assert cart.totals.discount_amount == 1000

    def test_injected_coupon_table(self, config):
        engine = CartEngine(config=config, coupons=StaticCouponTable({"HALF": {"discount": 50, "type": "percentage"}}))
        engine.add_item(make_item("a", 10000))

        assert engine.apply_coupon("WELCOME10") is False
        assert engine.apply_coupon("half") is True
        assert engine.totals.discounted_subtotal == 5000


# ========================================================================
# Persistence hook
# ========================================================================

class TestPersistence:

    def test_every_mutation_saves(self, config):
        store = RecordingStore()
        engine = CartEngine(config=config, persistence=store, session_id="s1")

        engine.add_item(make_item("a", 100))
        engine.update_quantity("a", 3)
        engine.apply_coupon("WELCOME10")
        engine.remove_coupon()
        engine.remove_item("a")
        engine.clear_cart()

        assert store.saves == 6

    def test_noops_do_not_save(self, config):
        store = RecordingStore()
        engine = CartEngine(config=config, persistence=store, session_id="s1")

        engine.remove_item("missing")
        engine.update_quantity("missing", 2)
        engine.add_item(make_item("a", 100), 0)
        engine.apply_coupon("NOTREAL")

        assert store.saves == 0

    def test_saved_snapshot_reflects_state(self, cart, store):
        cart.add_item(make_item("a", 100, color="Red"), 2)
        cart.apply_coupon("NEWCUSTOMER")

        snapshot = store.load_cart("test-session")
        assert [(i.product_id, i.color, i.quantity) for i in snapshot.items] == [("a", "Red", 2)]
        assert snapshot.applied_coupon.code == "NEWCUSTOMER"

    def test_load_cart_restores_and_recomputes(self, config, store):
        store.save_cart("s2", CartSnapshot(
            items=[make_item("a", 10000, 2), make_item("b", 5000, 1)],
            applied_coupon=Coupon("WELCOME10", 10, "percentage"),
        ))
        engine = CartEngine(config=config, persistence=store, session_id="s2")

        engine.load_cart()

        assert engine.item_count == 3
        assert engine.total == 26688

    def test_load_cart_clamps_to_caps(self, config, store):
        store.save_cart("s2", CartSnapshot(items=[
            make_item("a", 100, 40, max_quantity=3),
            make_item("b", 100, 150),
        ]))
        engine = CartEngine(config=config, persistence=store, session_id="s2")

        engine.load_cart()

        assert [item.quantity for item in engine.items] == [3, 99]
        assert engine.subtotal == 10200

    def test_load_cart_without_snapshot(self, cart):
        cart.load_cart()
        assert cart.is_empty
        assert cart.total == 0

    def test_store_failure_keeps_memory_state(self, config):
        engine = CartEngine(config=config, persistence=FailingStore(), session_id="s3")

        engine.load_cart()
        engine.add_item(make_item("a", 100), 2)

        assert engine.item_count == 2
        assert engine.subtotal == 200

    def test_works_without_persistence(self, config):
        engine = CartEngine(config=config)
        engine.add_item(make_item("a", 100))
        engine.save_cart()
        assert engine.subtotal == 100
