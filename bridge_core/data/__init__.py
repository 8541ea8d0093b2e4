# =============================================================================
# bridge_core/data/__init__.py
# Supabase client and provisioning SQL
# =============================================================================

from .supabase_client import get_supabase_client, get_cached_client, reset_supabase_clients
from .schema import PROVISIONING_SQL, build_provisioning_sql

__all__ = [
    "get_supabase_client",
    "get_cached_client",
    "reset_supabase_clients",
    "PROVISIONING_SQL",
    "build_provisioning_sql",
]
