# =============================================================================
# bridge_core/data/supabase_client.py
# Supabase Client Construction
# =============================================================================

from __future__ import annotations
import threading
from typing import Dict, Optional, Tuple
import logging

from bridge_core.config import StoreConfig

logger = logging.getLogger(__name__)

# One client per (url, key) pair, reused across sessions
_clients: Dict[Tuple[str, str], object] = {}
_clients_lock = threading.Lock()


def get_supabase_client(config: StoreConfig):
    """
    Create (or reuse) the Supabase client for ``config``.

    Returns:
        Supabase client instance or None if not configured
    """
    if not config.remote_configured:
        return None

    cache_key = (config.supabase_url, config.supabase_key)
    with _clients_lock:
        client = _clients.get(cache_key)
        if client is not None:
            return client

        try:
            from supabase import create_client

            client = create_client(config.supabase_url, config.supabase_key)
        except Exception as e:
            logger.error(f"Failed to initialize Supabase client: {e}")
            return None

        _clients[cache_key] = client
        logger.info(f"Supabase client created for {config.supabase_url}")
        return client


def reset_supabase_clients() -> None:
    """Drop cached clients (credentials changed, or tests)."""
    with _clients_lock:
        _clients.clear()


def get_cached_client(config: Optional[StoreConfig] = None):
    """Client for the environment configuration."""
    if config is None:
        from bridge_core.config import load_config
        config = load_config()
    return get_supabase_client(config)
