# =============================================================================
# bridge_core/offline/local_store.py
# Local Key/Value Persistence (SQLite)
# =============================================================================
"""
LocalStore - SQLite-backed key/value store, one JSON blob per key.

Features:
- One row per key (entity collection, cart, session flag)
- get() never raises: missing keys, bad JSON and SQLite errors fall back
- Thread-local connections, usable from refresh worker threads
"""

from __future__ import annotations
import json
import sqlite3
import threading
from datetime import datetime
from pathlib import Path
from typing import Any, List, Optional, Union
from contextlib import contextmanager
import logging

from bridge_core.errors import LocalStorageError

logger = logging.getLogger(__name__)


class LocalStore:
    """
    Local key/value store used as the offline medium and write-behind cache.

    Usage:
        store = LocalStore(Path("local_data/bridge_store.db"))
        store.set("admin_products", [{"id": "p1", "name": "Silk Wrap"}])
        products = store.get("admin_products", [])
    """

    DEFAULT_DB_PATH = Path("local_data") / "bridge_store.db"

    SCHEMA = """
        CREATE TABLE IF NOT EXISTS kv_store (
            key TEXT PRIMARY KEY,
            value TEXT,
            updated_at TEXT DEFAULT CURRENT_TIMESTAMP
        )
    """

    _instance: Optional[LocalStore] = None
    _lock = threading.Lock()

    def __init__(self, db_path: Optional[Union[str, Path]] = None):
        """
        Initialize local store.

        Args:
            db_path: Path to SQLite database file
        """
        self.db_path = Path(db_path) if db_path else self.DEFAULT_DB_PATH
        self._ensure_directory()
        self._local = threading.local()
        self._connections: List[sqlite3.Connection] = []
        self._conn_lock = threading.Lock()
        self._initialized = False
        self.initialize()

    @classmethod
    def get_instance(cls, db_path: Optional[Union[str, Path]] = None) -> LocalStore:
        """Get or create singleton instance."""
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = LocalStore(db_path)
        return cls._instance

    def _ensure_directory(self) -> None:
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

    def _get_connection(self) -> sqlite3.Connection:
        """Get thread-local database connection."""
        if getattr(self._local, "connection", None) is None:
            conn = sqlite3.connect(str(self.db_path), check_same_thread=False, timeout=10)
            conn.row_factory = sqlite3.Row
            self._local.connection = conn
            with self._conn_lock:
                self._connections.append(conn)
        return self._local.connection

    @contextmanager
    def transaction(self):
        """Context manager for database transactions."""
        conn = self._get_connection()
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise

    def initialize(self) -> None:
        """Create the key/value table."""
        if self._initialized:
            return

        with self.transaction() as conn:
            conn.execute(self.SCHEMA)

        self._initialized = True
        logger.debug(f"Local store initialized at: {self.db_path}")

    # =========================================================================
    # KEY/VALUE OPERATIONS
    # =========================================================================

    def get(self, key: str, fallback: Any = None) -> Any:
        """
        Read and decode the value stored under ``key``.

        Args:
            key: Storage key (e.g. "admin_products")
            fallback: Returned when the key is absent or unreadable

        Returns:
            Decoded JSON value or ``fallback``
        """
        try:
            row = self._get_connection().execute(
                "SELECT value FROM kv_store WHERE key = ?", [key]
            ).fetchone()
        except sqlite3.Error as e:
            logger.warning(f"Local read failed for '{key}': {e}")
            return fallback

        if row is None or row["value"] is None:
            return fallback

        try:
            return json.loads(row["value"])
        except (json.JSONDecodeError, TypeError) as e:
            logger.warning(f"Local value for '{key}' is not valid JSON ({e}); using fallback")
            return fallback

    def set(self, key: str, value: Any) -> None:
        """
        Encode ``value`` as JSON and store it under ``key``.

        Raises:
            LocalStorageError: value not serialisable or write failed
        """
        try:
            payload = json.dumps(value)
        except (TypeError, ValueError) as e:
            raise LocalStorageError(f"Value for '{key}' is not JSON serialisable: {e}", key=key)

        try:
            with self.transaction() as conn:
                conn.execute(
                    """
                    INSERT OR REPLACE INTO kv_store (key, value, updated_at)
                    VALUES (?, ?, ?)
                    """,
                    [key, payload, datetime.now().isoformat()]
                )
        except sqlite3.Error as e:
            raise LocalStorageError(f"Local write failed for '{key}': {e}", key=key)

    def has(self, key: str) -> bool:
        try:
            row = self._get_connection().execute(
                "SELECT 1 FROM kv_store WHERE key = ?", [key]
            ).fetchone()
        except sqlite3.Error:
            return False
        return row is not None

    def remove(self, key: str) -> None:
        with self.transaction() as conn:
            conn.execute("DELETE FROM kv_store WHERE key = ?", [key])

    def keys(self) -> List[str]:
        rows = self._get_connection().execute("SELECT key FROM kv_store ORDER BY key").fetchall()
        return [row["key"] for row in rows]

    def clear(self) -> None:
        """Remove every key (factory reset)."""
        with self.transaction() as conn:
            conn.execute("DELETE FROM kv_store")
        logger.info("Local store cleared")

    def release_thread_connection(self) -> None:
        """Close the calling thread's connection, if it opened one."""
        conn = getattr(self._local, "connection", None)
        if conn is None:
            return
        self._local.connection = None
        with self._conn_lock:
            if conn in self._connections:
                self._connections.remove(conn)
        try:
            conn.close()
        except sqlite3.Error as e:
            logger.debug(f"Closing worker connection failed: {e}")

    def close(self) -> None:
        """Close every connection opened by this store."""
        with self._conn_lock:
            for conn in self._connections:
                try:
                    conn.close()
                except sqlite3.Error:
                    continue
            self._connections.clear()
        self._local = threading.local()


# Singleton accessor
_local_store: Optional[LocalStore] = None


def get_local_store(db_path: Optional[Union[str, Path]] = None) -> LocalStore:
    """Get the global LocalStore instance."""
    global _local_store
    if _local_store is None:
        _local_store = LocalStore.get_instance(db_path)
    return _local_store
