# =============================================================================
# tests/unit/test_checkout_service.py
# Unit Tests for CheckoutService
# =============================================================================

import pytest
import requests
from unittest.mock import MagicMock


@pytest.fixture
def cart(local_store):
    from bridge_core.services.cart_service import CartService

    return CartService(local_store)


@pytest.fixture
def http():
    """Stand-in for the requests module"""
    mock_http = MagicMock()
    mock_http.post.return_value.raise_for_status.return_value = None
    return mock_http


@pytest.fixture
def checkout(offline_store, offline_gateway, cart, http):
    from bridge_core.services.checkout_service import CheckoutService

    return CheckoutService(offline_store, offline_gateway, cart, http=http)


class TestPlaceOrder:
    """Recording orders in local mode"""

    def test_empty_cart_raises(self, checkout, shipping):
        from bridge_core.errors import CheckoutError

        with pytest.raises(CheckoutError):
            checkout.place_order(shipping, "yoco")

    def test_missing_shipping_raises(self, checkout, cart, sample_product):
        from bridge_core.errors import CheckoutError

        cart.add(sample_product)

        with pytest.raises(CheckoutError, match="fullName"):
            checkout.place_order({"email": "a@b.co"}, "yoco")

    def test_unknown_payment_method_raises(self, checkout, cart, sample_product, shipping):
        from bridge_core.errors import CheckoutError

        cart.add(sample_product)

        with pytest.raises(CheckoutError):
            checkout.place_order(shipping, "bitcoin")

    def test_eft_order_is_pending_payment(self, checkout, cart, offline_store, sample_product, shipping):
        from bridge_core.models import OrderStatus

        offline_store.update_data("products", sample_product)
        cart.add(sample_product, quantity=2)

        order = checkout.place_order(shipping, "manual_eft", user_id="u1")

        assert order.id.startswith("ORD-") and len(order.id) == 10
        assert order.status == OrderStatus.PENDING_PAYMENT
        assert order.total == 900.0
        assert order.shippingAddress == "12 Long Street, Cape Town, 8001"
        assert offline_store.find("orders", order.id)["userId"] == "u1"

    def test_card_order_is_paid(self, checkout, cart, sample_product, shipping):
        from bridge_core.models import OrderStatus

        cart.add(sample_product)

        assert checkout.place_order(shipping, "yoco").status == OrderStatus.PAID

    def test_order_clears_cart(self, checkout, cart, sample_product, shipping):
        cart.add(sample_product)
        checkout.place_order(shipping, "yoco")

        assert cart.is_empty()

    def test_direct_sale_stock_decrements_with_floor(
        self, checkout, cart, offline_store, sample_products, shipping
    ):
        """Stock never goes below zero; non direct-sale items untouched"""
        for product in sample_products:
            offline_store.update_data("products", product)
        cart.add(sample_products[0], quantity=2)
        cart.add(sample_products[1])
        cart.add(sample_products[2], quantity=4)

        checkout.place_order(shipping, "payfast")

        assert offline_store.find("products", "p1")["stockQuantity"] == 3
        assert "stockQuantity" not in offline_store.find("products", "p2")
        assert offline_store.find("products", "p3")["stockQuantity"] == 0


class TestWebhook:
    """Best-effort order webhook"""

    def test_no_url_no_post(self, checkout, cart, sample_product, shipping, http):
        cart.add(sample_product)
        checkout.place_order(shipping, "yoco")

        http.post.assert_not_called()

    def test_posts_order_to_webhook(self, checkout, cart, offline_store, sample_product, shipping, http):
        offline_store.update_settings({"zapierWebhookUrl": "https://hooks.example.com/orders"})
        cart.add(sample_product)

        order = checkout.place_order(shipping, "yoco")

        args, kwargs = http.post.call_args
        assert args == ("https://hooks.example.com/orders",)
        assert kwargs["json"]["id"] == order.id
        assert kwargs["timeout"] == 5.0

    def test_webhook_failure_does_not_fail_order(
        self, checkout, cart, offline_store, sample_product, shipping, http
    ):
        offline_store.update_settings({"zapierWebhookUrl": "https://hooks.example.com/orders"})
        http.post.side_effect = requests.ConnectionError("unreachable")
        cart.add(sample_product)

        order = checkout.place_order(shipping, "yoco")

        assert offline_store.find("orders", order.id) is not None


class TestRemoteOrder:
    """Order items go to their own table when configured"""

    def test_order_items_inserted(self, online_store, online_gateway, local_store, mock_supabase_client,
                                  sample_product, shipping, http):
        from bridge_core.services.cart_service import CartService
        from bridge_core.services.checkout_service import CheckoutService

        cart = CartService(local_store)
        cart.add(sample_product, quantity=2)
        checkout = CheckoutService(online_store, online_gateway, cart, http=http)

        order = checkout.place_order(shipping, "yoco")

        inserted = mock_supabase_client.table.return_value.insert.call_args.args[0]
        assert inserted[0]["orderId"] == order.id
        assert inserted[0]["quantity"] == 2


class TestRedirectFlow:
    """PayFast redirect round trip"""

    def test_stash_and_pop_shipping(self, checkout, shipping):
        checkout.stash_pending_shipping(shipping)

        assert checkout.pop_pending_shipping() == shipping
        assert checkout.pop_pending_shipping() is None

    def test_complete_redirect_uses_stashed_shipping(self, checkout, cart, sample_product, shipping):
        from bridge_core.models import PaymentMethod

        cart.add(sample_product)
        checkout.stash_pending_shipping(shipping)

        order = checkout.complete_redirect_order({"id": "u1", "email": "x@y.co"})

        assert order.paymentMethod == PaymentMethod.PAYFAST
        assert order.customerName == "Thandi Mokoena"

    def test_complete_redirect_falls_back_to_account(self, checkout, cart, sample_product):
        cart.add(sample_product)

        order = checkout.complete_redirect_order(
            {"id": "u1", "email": "x@y.co", "user_metadata": {"full_name": "Lerato"}}
        )

        assert order.customerName == "Lerato"
        assert order.customerEmail == "x@y.co"

    def test_complete_redirect_with_empty_cart(self, checkout):
        assert checkout.complete_redirect_order({"id": "u1"}) is None
