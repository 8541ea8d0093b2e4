# =============================================================================
# bridge_core/services/__init__.py
# Service Layer for the Bridge storefront
# =============================================================================
"""
Service Layer for the Bridge storefront

Business operations on top of the sync store. Nothing here imports
bridge_core.offline at module level; stores and gateways are injected.

Usage Example:
-------------
    from bridge_core.offline import get_sync_store
    from bridge_core.services import CartService, CheckoutService

    store = get_sync_store()
    cart = CartService(store.local_store)
    cart.add(store.find("products", "p1"), quantity=2)

    checkout = CheckoutService(store, store.gateway, cart)
    order = checkout.place_order(shipping, "manual_eft")

Admin actions:
-------------
    from bridge_core.services import AdminWorkspace, OptimisticMutator

    mutator = OptimisticMutator(store, store.gateway)
    workspace = AdminWorkspace(store, store.gateway, store.local_store, mutator, gate)
    result = workspace.save_product({"name": "Silk Wrap", "price": 450})
"""

from .base_service import BaseService, ServiceResult, ResultCode
from .mutations import SaveStatusTracker, OptimisticMutator
from .cart_service import CartService
from .checkout_service import CheckoutService, new_order_id
from .storefront_service import StorefrontService, average_rating
from .analytics_service import AnalyticsService, EngagementKPIs, engagement_frame
from .admin_workspace import AdminWorkspace

__all__ = [
    "BaseService",
    "ServiceResult",
    "ResultCode",
    "SaveStatusTracker",
    "OptimisticMutator",
    "CartService",
    "CheckoutService",
    "new_order_id",
    "StorefrontService",
    "average_rating",
    "AnalyticsService",
    "EngagementKPIs",
    "engagement_frame",
    "AdminWorkspace",
]
