# =============================================================================
# bridge_core/config/settings.py
# Runtime Configuration (Supabase credentials, local paths, timings)
# =============================================================================
"""
StoreConfig - connection credentials and tuning knobs for the data layer.

Credentials are read from the environment first:

    SUPABASE_URL=https://your-project.supabase.co
    SUPABASE_ANON_KEY=your-anon-key

and, when absent, from Streamlit secrets (.streamlit/secrets.toml):

    [supabase]
    url = "https://your-project.supabase.co"
    key = "your-anon-key"

Missing or malformed credentials force local-only mode; they never raise.
"""

from __future__ import annotations
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional
from urllib.parse import urlparse
import logging

from bridge_core.errors import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_DATA_DIR = Path("local_data")


def is_valid_supabase_url(url: Optional[str]) -> bool:
    """True when ``url`` looks like a hosted Supabase project URL."""
    if not url:
        return False
    parsed = urlparse(url)
    return parsed.scheme in ("http", "https") and bool(parsed.hostname) and "supabase.co" in parsed.hostname


@dataclass
class StoreConfig:
    """Configuration for the storefront data layer."""
    supabase_url: str = ""
    supabase_key: str = ""
    local_db_path: Path = DEFAULT_DATA_DIR / "bridge_store.db"
    media_dir: Path = DEFAULT_DATA_DIR / "media"
    media_bucket: str = "media"
    status_reset_seconds: float = 2.0
    local_save_delay: float = 0.6
    refresh_workers: int = 6
    webhook_timeout: float = 5.0
    seed_empty_database: bool = True

    @property
    def remote_configured(self) -> bool:
        """Both credentials present and the URL has the expected shape."""
        return bool(self.supabase_key) and is_valid_supabase_url(self.supabase_url)

    def require_remote(self) -> None:
        """
        Raise ConfigurationError unless a remote backend is configured.

        For tooling that only makes sense against Supabase (schema checks,
        migrations); the data layer itself falls back to local mode instead.
        """
        if not self.supabase_url:
            raise ConfigurationError("SUPABASE_URL is not set", config_key="SUPABASE_URL")
        if not is_valid_supabase_url(self.supabase_url):
            raise ConfigurationError(
                f"Invalid Supabase URL: {self.supabase_url}",
                config_key="SUPABASE_URL",
                expected_type="https://<project>.supabase.co",
            )
        if not self.supabase_key:
            raise ConfigurationError("SUPABASE_ANON_KEY is not set", config_key="SUPABASE_ANON_KEY")

    def describe(self) -> Dict[str, Any]:
        """Status dict safe for display (never includes the key)."""
        return {
            "mode": "cloud" if self.remote_configured else "local",
            "supabase_url": self.supabase_url or None,
            "key_present": bool(self.supabase_key),
            "local_db_path": str(self.local_db_path),
        }


def _secrets_credentials() -> Dict[str, str]:
    """Read the [supabase] block from Streamlit secrets, if any."""
    try:
        import streamlit as st

        if "supabase" in st.secrets:
            block = st.secrets["supabase"]
            return {"url": block.get("url", ""), "key": block.get("key", "")}
    except Exception as e:
        logger.debug(f"Streamlit secrets unavailable: {e}")
    return {}


def load_config(**overrides: Any) -> StoreConfig:
    """
    Build a StoreConfig from the environment (then Streamlit secrets).

    Args:
        **overrides: Field values that take precedence over both sources

    Returns:
        StoreConfig
    """
    url = os.getenv("SUPABASE_URL", "")
    key = os.getenv("SUPABASE_ANON_KEY") or os.getenv("SUPABASE_KEY", "")

    if not url or not key:
        secrets = _secrets_credentials()
        url = url or secrets.get("url", "")
        key = key or secrets.get("key", "")

    data_dir = Path(os.getenv("BRIDGE_DATA_DIR", str(DEFAULT_DATA_DIR)))

    values: Dict[str, Any] = {
        "supabase_url": (url or "").strip(),
        "supabase_key": (key or "").strip(),
        "local_db_path": data_dir / "bridge_store.db",
        "media_dir": data_dir / "media",
    }
    values.update(overrides)
    config = StoreConfig(**values)

    if not config.supabase_url:
        logger.warning("Supabase URL not found; running in local-only mode")
    elif not is_valid_supabase_url(config.supabase_url):
        logger.warning(f"Invalid Supabase URL format: {config.supabase_url}; running in local-only mode")
    elif not config.supabase_key:
        logger.warning("Supabase key not found; running in local-only mode")
    else:
        logger.info("Supabase configuration detected")

    return config
