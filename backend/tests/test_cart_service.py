"""
Tests for CartService and CartAggregator
"""
from unittest.mock import Mock

import pytest

from storefront.config import Settings
from storefront.core.errors import InvalidInput, NotFound, SchemaMismatch, Timeout
from storefront.repositories.products import ProductStore
from storefront.services.cart_service import CartService


def _clock(*ticks):
    it = iter(ticks)
    return lambda: next(it)


class TestAddToCart:
    def test_add_then_summary_reflects_price(self, cart_service, cart_aggregator):
        before = cart_aggregator.get_cart_summary("user-1").total
        cart_service.add_to_cart("prod-25", "user-1")
        after = cart_aggregator.get_cart_summary("user-1")

        assert after.total == pytest.approx(before + 25.5)
        assert after.items[-1]["product_id"] == "prod-25"
        assert after.items[-1]["price"] == 25.5

    def test_line_snapshots_product(self, cart_service, user_store):
        line = cart_service.add_to_cart("prod-10", "user-1")

        stored = user_store.docs["user-1"]["cart"][0]
        assert stored["line_id"] == line.line_id
        assert stored["product_name"] == "Desk Lamp"
        assert stored["image"] == "https://cdn.test/lamp.png"

    def test_same_product_twice_appends_two_lines(self, cart_service, cart_aggregator, user_store):
        cart_service.add_to_cart("prod-10", "user-1")
        cart_service.add_to_cart("prod-10", "user-1")

        cart = user_store.docs["user-1"]["cart"]
        assert [c["product_id"] for c in cart] == ["prod-10", "prod-10"]
        assert cart[0]["line_id"] != cart[1]["line_id"]
        assert cart_aggregator.get_cart_summary("user-1").total == 20.0

    def test_unknown_product_is_not_found_and_cart_untouched(self, cart_service, user_store):
        with pytest.raises(NotFound):
            cart_service.add_to_cart("nope", "user-1")
        assert user_store.docs["user-1"]["cart"] == []
        assert "append_to_cart" not in user_store.calls

    def test_unknown_user_is_not_found(self, cart_service, user_store):
        with pytest.raises(NotFound):
            cart_service.add_to_cart("prod-10", "ghost")
        assert "append_to_cart" not in user_store.calls

    def test_empty_product_id_makes_no_store_call(self, cart_service, product_store, user_store):
        with pytest.raises(InvalidInput):
            cart_service.add_to_cart("", "user-1")
        assert product_store.calls == []
        assert user_store.calls == []

    @pytest.mark.parametrize("bad_id", ["a/b", "..", "__reserved__", "   "])
    def test_malformed_ids_are_invalid_input(self, cart_service, product_store, bad_id):
        with pytest.raises(InvalidInput):
            cart_service.add_to_cart(bad_id, "user-1")
        assert product_store.calls == []

    def test_other_users_unaffected(self, cart_service, user_store):
        cart_service.add_to_cart("prod-10", "user-1")
        assert user_store.docs["user-2"]["cart"] == []


class TestRemoveItem:
    def test_removes_every_line_of_the_product(self, cart_service, user_store):
        cart_service.add_to_cart("prod-10", "user-1")
        cart_service.add_to_cart("prod-25", "user-1")
        cart_service.add_to_cart("prod-10", "user-1")

        removed = cart_service.remove_item("prod-10", "user-1")

        assert removed == 2
        assert [c["product_id"] for c in user_store.docs["user-1"]["cart"]] == ["prod-25"]

    def test_missing_item_is_a_noop(self, cart_service, user_store):
        cart_service.add_to_cart("prod-25", "user-1")
        before = list(user_store.docs["user-1"]["cart"])

        assert cart_service.remove_item("prod-10", "user-1") == 0
        assert user_store.docs["user-1"]["cart"] == before

    def test_empty_user_id(self, cart_service, user_store):
        with pytest.raises(InvalidInput):
            cart_service.remove_item("prod-10", "")
        assert user_store.calls == []


class TestCartSummary:
    def test_empty_cart_totals_zero(self, cart_aggregator):
        summary = cart_aggregator.get_cart_summary("user-1")
        assert summary.total == 0.0
        assert summary.items == []

    def test_unknown_user(self, cart_aggregator):
        with pytest.raises(NotFound):
            cart_aggregator.get_cart_summary("ghost")

    def test_returns_full_cart(self, cart_service, cart_aggregator):
        cart_service.add_to_cart("prod-10", "user-1")
        cart_service.add_to_cart("prod-099", "user-1")

        summary = cart_aggregator.get_cart_summary("user-1")
        assert summary.total == 10.99
        assert [i["product_id"] for i in summary.items] == ["prod-10", "prod-099"]


class TestBuyFromCart:
    def test_checkout_scenario(self, cart_service, cart_aggregator, user_store):
        cart_service.add_to_cart("prod-10", "user-1")
        summary = cart_aggregator.get_cart_summary("user-1")
        assert summary.total == 10.0
        assert len(summary.items) == 1

        order = cart_service.buy_from_cart("user-1")

        assert cart_aggregator.get_cart_summary("user-1").total == 0.0
        orders = user_store.docs["user-1"]["orders"]
        assert len(orders) == 1
        assert orders[0]["total_price"] == 10.0
        assert orders[0]["order_id"] == order.order_id
        assert [i["product_id"] for i in orders[0]["items"]] == ["prod-10"]
        assert orders[0]["discount"] == 0.0

    def test_second_checkout_yields_empty_order(self, cart_service, user_store):
        cart_service.add_to_cart("prod-25", "user-1")
        first = cart_service.buy_from_cart("user-1")
        second = cart_service.buy_from_cart("user-1")

        assert first.total_price == 25.5
        assert second.items == []
        assert second.total_price == 0.0
        assert first.order_id != second.order_id
        assert len(user_store.docs["user-1"]["orders"]) == 2

    def test_order_items_are_a_copy_of_the_cart(self, cart_service, user_store):
        cart_service.add_to_cart("prod-10", "user-1")
        order = cart_service.buy_from_cart("user-1")
        cart_service.add_to_cart("prod-25", "user-1")

        assert [i["product_id"] for i in order.items] == ["prod-10"]
        assert [i["product_id"] for i in user_store.docs["user-1"]["orders"][0]["items"]] == ["prod-10"]

    def test_unknown_user(self, cart_service):
        with pytest.raises(NotFound):
            cart_service.buy_from_cart("ghost")


class TestInstantBuy:
    def test_does_not_touch_cart(self, cart_service, user_store):
        cart_service.add_to_cart("prod-25", "user-1")
        cart_before = list(user_store.docs["user-1"]["cart"])

        order = cart_service.instant_buy("user-1", "prod-10")

        assert user_store.docs["user-1"]["cart"] == cart_before
        assert order.total_price == 10.0
        assert [i["product_id"] for i in order.items] == ["prod-10"]
        assert user_store.docs["user-1"]["orders"][-1]["order_id"] == order.order_id
        assert "remove_from_cart" not in user_store.calls
        assert "checkout" not in user_store.calls

    def test_works_with_empty_cart(self, cart_service, user_store):
        cart_service.instant_buy("user-2", "prod-099")
        assert user_store.docs["user-2"]["cart"] == []
        assert user_store.docs["user-2"]["orders"][0]["total_price"] == 0.99

    def test_unknown_product(self, cart_service, user_store):
        with pytest.raises(NotFound):
            cart_service.instant_buy("user-1", "nope")
        assert user_store.docs["user-1"]["orders"] == []

    def test_unknown_user(self, cart_service):
        with pytest.raises(NotFound):
            cart_service.instant_buy("ghost", "prod-10")


class TestProductWithoutPrice:
    @pytest.fixture(params=[{"name": "Broken"}, {"name": "Broken", "price": None}])
    def service(self, request, user_store):
        """CartService over the real ProductStore reading a product document with no usable price"""
        client = Mock()
        snap = Mock(id="noprice", exists=True)
        snap.to_dict.return_value = request.param
        client.collection.return_value.document.return_value.get.return_value = snap
        settings = Settings(firebase_project_id="test-project", firebase_collection_prefix="")
        return CartService(ProductStore(client, settings), user_store, write_timeout=5.0, checkout_timeout=100.0)

    def test_add_to_cart_is_schema_mismatch(self, service, user_store):
        with pytest.raises(SchemaMismatch):
            service.add_to_cart("noprice", "user-1")
        assert user_store.docs["user-1"]["cart"] == []
        assert "append_to_cart" not in user_store.calls

    def test_instant_buy_is_schema_mismatch(self, service, user_store):
        with pytest.raises(SchemaMismatch):
            service.instant_buy("user-1", "noprice")
        assert user_store.docs["user-1"]["orders"] == []
        assert "append_order" not in user_store.calls


class TestOperationDeadline:
    def test_add_to_cart_calls_share_one_deadline(self, product_store, user_store):
        service = CartService(
            product_store, user_store, write_timeout=5.0, checkout_timeout=100.0,
            clock=_clock(0.0, 1.0, 2.5, 4.0),
        )

        service.add_to_cart("prod-10", "user-1")

        assert product_store.timeouts == [4.0]
        assert user_store.calls == ["find_by_id", "append_to_cart"]
        assert user_store.timeouts == [2.5, 1.0]

    def test_spent_deadline_stops_before_the_write(self, product_store, user_store):
        service = CartService(
            product_store, user_store, write_timeout=5.0, checkout_timeout=100.0,
            clock=_clock(0.0, 1.0, 2.0, 5.5),
        )

        with pytest.raises(Timeout):
            service.add_to_cart("prod-10", "user-1")
        assert "append_to_cart" not in user_store.calls
        assert user_store.docs["user-1"]["cart"] == []

    def test_instant_buy_calls_share_one_deadline(self, product_store, user_store):
        service = CartService(
            product_store, user_store, write_timeout=5.0, checkout_timeout=100.0,
            clock=_clock(0.0, 3.0, 7.0),
        )

        with pytest.raises(Timeout):
            service.instant_buy("user-1", "prod-10")
        assert product_store.timeouts == [2.0]
        assert user_store.docs["user-1"]["orders"] == []

    def test_checkout_gets_the_checkout_budget(self, product_store, user_store):
        service = CartService(
            product_store, user_store, write_timeout=5.0, checkout_timeout=100.0,
            clock=_clock(0.0, 0.5),
        )

        service.buy_from_cart("user-1")

        assert user_store.timeouts == [99.5]
