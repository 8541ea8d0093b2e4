# =============================================================================
# bridge_core/offline/__init__.py
# Local-First Data Layer for the Bridge Storefront
# =============================================================================
"""
Local-First Data Layer

The storefront works identically whether Supabase is configured or not.
Without credentials every collection lives in the local SQLite store;
with them, the local store becomes a write-behind mirror.

Architecture:
------------
    ┌──────────────────────────────────────────────┐
    │        OptimisticMutator (admin edits)        │
    └──────────────────────────────────────────────┘
                         │
                         ▼
    ┌──────────────────────────────────────────────┐
    │     SyncStore (canonical in-memory lists)     │
    └──────────────────────────────────────────────┘
              │                          │
              ▼                          ▼
    ┌──────────────────┐       ┌──────────────────┐
    │   LocalStore     │       │  RemoteGateway   │
    │ (SQLite key/val) │◄──────│   (Supabase)     │
    └──────────────────┘ fall- └──────────────────┘
                         back           ▲
                                        │
                              ┌──────────────────┐
                              │ ConnectionMonitor│
                              └──────────────────┘

Usage:
------
from bridge_core.offline import get_sync_store

store = get_sync_store()
store.refresh_all_data()
store.update_data("products", product)
"""

from __future__ import annotations
import threading
from typing import Optional

from bridge_core.offline.local_store import (
    LocalStore,
    get_local_store,
)

from bridge_core.offline.remote_gateway import (
    RemoteGateway,
    is_schema_missing,
)

from bridge_core.offline.sync_store import SyncStore

from bridge_core.offline.connection_manager import (
    ConnectionMonitor,
    ConnectionState,
    ConnectionStatus,
)

# Singleton accessor
_sync_store: Optional[SyncStore] = None
_sync_store_lock = threading.Lock()


def get_sync_store(config=None) -> SyncStore:
    """
    Get the process-wide SyncStore, wiring it from ``config`` (or the
    environment) on first use.
    """
    global _sync_store
    if _sync_store is None:
        with _sync_store_lock:
            if _sync_store is None:
                from bridge_core.config import load_config

                config = config or load_config()
                local_store = get_local_store(config.local_db_path)
                gateway = RemoteGateway.from_config(config, local_store)
                _sync_store = SyncStore(gateway, local_store, config)
    return _sync_store


__all__ = [
    "LocalStore",
    "get_local_store",
    "RemoteGateway",
    "is_schema_missing",
    "SyncStore",
    "get_sync_store",
    "ConnectionMonitor",
    "ConnectionState",
    "ConnectionStatus",
]
