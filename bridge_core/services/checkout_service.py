# =============================================================================
# bridge_core/services/checkout_service.py
# Order recording for direct sales
# =============================================================================
"""
CheckoutService - turns the cart into an order record.

Steps (independent calls, no atomicity between them):
1. update_data('orders', order)
2. insert order_items remotely
3. decrement stock of direct-sale products (floor 0)
4. POST the order to the configured webhook (best effort)
5. clear the cart

Payment itself (card popup, redirect gateways) happens outside this
package; the caller reports which method succeeded.
"""

from __future__ import annotations
import uuid
from typing import TYPE_CHECKING, Any, Dict, Optional, Union

import requests

from bridge_core.errors import CheckoutError
from bridge_core.models import (
    PENDING_SHIPPING_KEY,
    Order,
    OrderItem,
    OrderStatus,
    PaymentMethod,
    now_ms,
)
from bridge_core.services.base_service import BaseService
from bridge_core.services.cart_service import CartService

if TYPE_CHECKING:
    from bridge_core.offline.remote_gateway import RemoteGateway
    from bridge_core.offline.sync_store import SyncStore

REQUIRED_SHIPPING_FIELDS = ("fullName", "email")


def new_order_id() -> str:
    """ORD- followed by the last six digits of the epoch milliseconds."""
    return f"ORD-{str(now_ms())[-6:]}"


def format_address(shipping: Dict[str, Any]) -> str:
    parts = [shipping.get("address", ""), shipping.get("city", ""), shipping.get("zipCode", "")]
    return ", ".join(p for p in parts if p)


class CheckoutService(BaseService):
    """
    Records orders placed through the storefront.

    Usage:
        checkout = CheckoutService(store, gateway, cart)
        order = checkout.place_order(shipping, "manual_eft", user_id=user["id"])
    """

    def __init__(
        self,
        store: SyncStore,
        gateway: RemoteGateway,
        cart: CartService,
        http: Any = None,
        webhook_timeout: float = 5.0,
    ):
        super().__init__()
        self.store = store
        self.gateway = gateway
        self.cart = cart
        self.http = http or requests
        self.webhook_timeout = webhook_timeout

    def _build_order(
        self,
        shipping: Dict[str, Any],
        method: PaymentMethod,
        user_id: Optional[str],
    ) -> Order:
        order_id = new_order_id()
        items = [
            OrderItem(
                id=uuid.uuid4().hex[:9],
                orderId=order_id,
                productId=line.id,
                productName=line.name,
                quantity=line.quantity,
                price=line.price,
            )
            for line in self.cart.items
        ]
        return Order(
            id=order_id,
            userId=user_id,
            customerName=shipping.get("fullName", ""),
            customerEmail=shipping.get("email", ""),
            shippingAddress=format_address(shipping),
            total=self.cart.total,
            status=OrderStatus.PENDING_PAYMENT if method == PaymentMethod.MANUAL_EFT else OrderStatus.PAID,
            paymentMethod=method,
            items=items,
        )

    def place_order(
        self,
        shipping: Dict[str, Any],
        method: Union[str, PaymentMethod],
        user_id: Optional[str] = None,
    ) -> Order:
        """
        Record an order for the current cart.

        Args:
            shipping: fullName, email, address, city, zipCode
            method: "yoco", "payfast" or "manual_eft"
            user_id: Signed-in customer id, if any

        Returns:
            The recorded Order

        Raises:
            CheckoutError: empty cart, missing shipping details or an
                unknown payment method
        """
        if self.cart.is_empty():
            raise CheckoutError("Your cart is empty.")

        missing = [f for f in REQUIRED_SHIPPING_FIELDS if not shipping.get(f)]
        if missing:
            raise CheckoutError(f"Missing shipping details: {', '.join(missing)}")

        try:
            method = PaymentMethod(method)
        except ValueError:
            raise CheckoutError(f"Unsupported payment method: {method}")

        order = self._build_order(shipping, method, user_id)
        record = order.to_record()

        with self.log_operation(f"Placing order {order.id}"):
            if not self.store.update_data("orders", record):
                self.logger.warning(f"Order {order.id} kept locally; remote save failed")

            if self.gateway.is_configured:
                result = self.gateway.insert("order_items", [item.to_record() for item in order.items])
                if not result.success:
                    self.logger.error(f"Item save error: {result.error}")

            self._decrement_stock(order)
            self._trigger_webhook(record)
            self.cart.clear()

        return order

    def _decrement_stock(self, order: Order) -> None:
        for item in order.items:
            product = self.store.find("products", item.productId)
            if not product or not product.get("isDirectSale"):
                continue
            stock = product.get("stockQuantity")
            if not isinstance(stock, (int, float)) or isinstance(stock, bool):
                continue
            product["stockQuantity"] = max(0, int(stock) - item.quantity)
            self.store.update_data("products", product)

    def _trigger_webhook(self, record: Dict[str, Any]) -> bool:
        url = (self.store.settings.get("zapierWebhookUrl") or "").strip()
        if not url:
            return False
        try:
            response = self.http.post(url, json=record, timeout=self.webhook_timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            self.logger.warning(f"Webhook trigger warning: {e}")
            return False
        return True

    # =========================================================================
    # REDIRECT FLOWS
    # =========================================================================

    def stash_pending_shipping(self, shipping: Dict[str, Any]) -> None:
        """Keep shipping details while the customer is at an external payment page."""
        self.store.local_store.set(PENDING_SHIPPING_KEY, shipping)

    def pop_pending_shipping(self) -> Optional[Dict[str, Any]]:
        shipping = self.store.local_store.get(PENDING_SHIPPING_KEY)
        self.store.local_store.remove(PENDING_SHIPPING_KEY)
        return shipping

    def complete_redirect_order(self, user: Dict[str, Any]) -> Optional[Order]:
        """
        Record the order after a successful PayFast return.

        Falls back to the account details when no shipping was stashed.
        Returns None when the cart is empty.
        """
        if self.cart.is_empty():
            return None
        shipping = self.pop_pending_shipping() or {
            "fullName": (user.get("user_metadata") or {}).get("full_name") or "Customer",
            "email": user.get("email", ""),
            "address": "Address not provided (PayFast Return)",
        }
        return self.place_order(shipping, PaymentMethod.PAYFAST, user_id=user.get("id"))
