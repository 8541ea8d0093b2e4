# =============================================================================
# bridge_core/models/__init__.py
# Table registry, record types and defaults
# =============================================================================

from .tables import (
    CollectionSpec,
    TABLES,
    SETTINGS_TABLE,
    SETTINGS_ID,
    CART_KEY,
    ADMIN_SESSION_KEY,
    CLIENT_SESSION_KEY,
    PENDING_SHIPPING_KEY,
    get_spec,
    local_key,
    key_field,
    public_tables,
    record_key,
)
from .entities import (
    SaveStatus,
    EnquiryStatus,
    AdminRole,
    OrderStatus,
    PaymentMethod,
    CartItem,
    OrderItem,
    Order,
    ProductStats,
    Review,
    TrafficEvent,
    now_ms,
)
from .defaults import DEFAULT_SETTINGS, SEED_DATA, default_settings

__all__ = [
    "CollectionSpec",
    "TABLES",
    "SETTINGS_TABLE",
    "SETTINGS_ID",
    "CART_KEY",
    "ADMIN_SESSION_KEY",
    "CLIENT_SESSION_KEY",
    "PENDING_SHIPPING_KEY",
    "get_spec",
    "local_key",
    "key_field",
    "public_tables",
    "record_key",
    "SaveStatus",
    "EnquiryStatus",
    "AdminRole",
    "OrderStatus",
    "PaymentMethod",
    "CartItem",
    "OrderItem",
    "Order",
    "ProductStats",
    "Review",
    "TrafficEvent",
    "now_ms",
    "DEFAULT_SETTINGS",
    "SEED_DATA",
    "default_settings",
]
