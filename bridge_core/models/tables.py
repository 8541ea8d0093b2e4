# =============================================================================
# bridge_core/models/tables.py
# Table Registry - remote table names, local keys, refresh membership
# =============================================================================
"""
Typed map from table name to its collection spec.

Every place that needs to route by table (local key lookup, key field,
whether refresh_all_data pulls it) reads this registry instead of
switching on strings.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, List, Tuple

SETTINGS_TABLE = "settings"
SETTINGS_ID = "global"

# Local-only keys (no remote table)
CART_KEY = "shopping_cart"
ADMIN_SESSION_KEY = "admin_session"
CLIENT_SESSION_KEY = "client_session"
PENDING_SHIPPING_KEY = "pending_order_shipping"


@dataclass(frozen=True)
class CollectionSpec:
    """How one entity collection is stored locally and remotely."""
    table: str
    local_key: str
    key_field: str = "id"
    public: bool = False     # refreshed by SyncStore.refresh_all_data
    singleton: bool = False  # one record (settings)


TABLES: Dict[str, CollectionSpec] = {
    spec.table: spec
    for spec in (
        CollectionSpec("settings", "site_settings", public=True, singleton=True),
        CollectionSpec("products", "admin_products", public=True),
        CollectionSpec("categories", "admin_categories", public=True),
        CollectionSpec("subcategories", "admin_subcategories", public=True),
        CollectionSpec("carousel_slides", "admin_hero", public=True),
        CollectionSpec("enquiries", "admin_enquiries", public=True),
        CollectionSpec("orders", "admin_orders", public=True),
        CollectionSpec("articles", "admin_articles", public=True),
        CollectionSpec("admin_users", "admin_users"),
        CollectionSpec("product_stats", "admin_product_stats", key_field="productId"),
        CollectionSpec("subscribers", "admin_subscribers"),
        CollectionSpec("training_modules", "admin_training_modules"),
        CollectionSpec("traffic_logs", "site_traffic_logs"),
        CollectionSpec("profiles", "client_profiles"),
    )
}


def get_spec(table: str) -> CollectionSpec:
    """Spec for ``table``; unknown tables get ``admin_<table>`` keyed by id."""
    spec = TABLES.get(table)
    if spec is None:
        spec = CollectionSpec(table, f"admin_{table}")
    return spec


def local_key(table: str) -> str:
    return get_spec(table).local_key


def key_field(table: str) -> str:
    return get_spec(table).key_field


def public_tables() -> List[str]:
    """Tables pulled by a full refresh, settings first."""
    return [name for name, spec in TABLES.items() if spec.public]


def record_key(table: str, record: dict) -> Tuple[str, object]:
    """(key field, key value) of ``record`` for ``table``."""
    field_name = key_field(table)
    return field_name, record.get(field_name)
