# =============================================================================
# bridge_core/offline/sync_store.py
# Sync Orchestrator - canonical in-memory collections
# =============================================================================
"""
SyncStore - holds one list per table plus the merged site settings and
decides, per operation, whether to write through to the remote gateway.

Write path:  memory -> local store (synchronous) -> remote upsert/delete
Read path:   refresh_all_data() pulls every public table in parallel

Optimistic updates have no rollback. A failed remote write leaves the
local change in place; the next successful refresh_all_data() replaces it
with the server's version.
"""

from __future__ import annotations
import copy
import threading
import uuid
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional
import logging

from bridge_core.config import StoreConfig
from bridge_core.errors import LocalStorageError, error_boundary
from bridge_core.models import (
    TABLES,
    SETTINGS_TABLE,
    SETTINGS_ID,
    SEED_DATA,
    SaveStatus,
    TrafficEvent,
    default_settings,
    get_spec,
    public_tables,
    now_ms,
)
from bridge_core.offline.local_store import LocalStore
from bridge_core.offline.remote_gateway import RemoteGateway
from bridge_core.services.base_service import ServiceResult, ResultCode
from bridge_core.services.mutations import SaveStatusTracker

logger = logging.getLogger(__name__)

ChangeCallback = Callable[[str], None]


class SyncStore:
    """
    Dependency-injected store object for the storefront collections.

    Usage:
        store = SyncStore(gateway, local_store, config)
        store.refresh_all_data()
        store.update_data("products", {"id": "p1", "name": "Silk Wrap"})
        products = store.get("products")
    """

    MAX_TRAFFIC_LOGS = 500

    def __init__(
        self,
        gateway: RemoteGateway,
        local_store: LocalStore,
        config: Optional[StoreConfig] = None,
        tracker: Optional[SaveStatusTracker] = None,
    ):
        self.gateway = gateway
        self.local_store = local_store
        self.config = config or StoreConfig()
        self.tracker = tracker or SaveStatusTracker(self.config.status_reset_seconds)

        self._collections: Dict[str, List[Dict[str, Any]]] = {}
        self._settings: Dict[str, Any] = default_settings()
        self._callbacks: List[ChangeCallback] = []
        self._lock = threading.RLock()
        self.is_database_provisioned = False
        self.last_result: Optional[ServiceResult] = None

        self.hydrate()

    # =========================================================================
    # STATE
    # =========================================================================

    def hydrate(self) -> None:
        """Load every collection from the local store; settings start from the defaults."""
        with self._lock:
            self._settings = default_settings()
            for table, spec in TABLES.items():
                if spec.singleton:
                    continue
                value = self.local_store.get(spec.local_key, [])
                self._collections[table] = value if isinstance(value, list) else []

            stored = self.local_store.get(get_spec(SETTINGS_TABLE).local_key, {})
            if isinstance(stored, list):
                stored = stored[0] if stored else {}
            if isinstance(stored, dict):
                self._settings.update(stored)
            self._settings["id"] = SETTINGS_ID

        logger.debug("Sync store hydrated from local store")

    def get(self, table: str) -> List[Dict[str, Any]]:
        """Copy of the collection for ``table`` (settings as a one-row list)."""
        with self._lock:
            if table == SETTINGS_TABLE:
                return [copy.deepcopy(self._settings)]
            return copy.deepcopy(self._collections.get(table, []))

    def find(self, table: str, record_id: Any) -> Optional[Dict[str, Any]]:
        field_name = get_spec(table).key_field
        with self._lock:
            for record in self._collections.get(table, []):
                if record.get(field_name) == record_id:
                    return copy.deepcopy(record)
        return None

    @property
    def settings(self) -> Dict[str, Any]:
        with self._lock:
            return copy.deepcopy(self._settings)

    @property
    def products(self) -> List[Dict[str, Any]]:
        return self.get("products")

    @property
    def categories(self) -> List[Dict[str, Any]]:
        return self.get("categories")

    @property
    def enquiries(self) -> List[Dict[str, Any]]:
        return self.get("enquiries")

    @property
    def save_status(self) -> SaveStatus:
        return self.tracker.status

    def set_save_status(self, status: SaveStatus) -> None:
        self.tracker.set(status)

    # =========================================================================
    # CALLBACKS
    # =========================================================================

    def register_callback(self, callback: ChangeCallback) -> None:
        """Register a callback called with the table name after each change."""
        self._callbacks.append(callback)

    def unregister_callback(self, callback: ChangeCallback) -> None:
        if callback in self._callbacks:
            self._callbacks.remove(callback)

    def _notify_callbacks(self, table: str) -> None:
        for callback in self._callbacks:
            try:
                callback(table)
            except Exception as e:
                logger.error(f"Callback error: {e}")

    # =========================================================================
    # LOCAL MIRROR
    # =========================================================================

    def _persist(self, table: str) -> bool:
        """Mirror the in-memory value of ``table`` to the local store."""
        spec = get_spec(table)
        value = self._settings if spec.singleton else self._collections.get(table, [])
        try:
            self.local_store.set(spec.local_key, value)
            return True
        except LocalStorageError as e:
            logger.error(f"Local mirror of '{table}' failed: {e.message}")
            return False

    def _replace_collection(self, table: str, rows: Optional[List[Dict[str, Any]]]) -> None:
        # None keeps the previous value; collections are always lists
        if rows is None:
            return
        with self._lock:
            self._collections[table] = list(rows)
            self._persist(table)
        self._notify_callbacks(table)

    def _merge_settings(self, row: Optional[Dict[str, Any]]) -> None:
        if not row:
            return
        with self._lock:
            self._settings.update(row)
            self._settings["id"] = SETTINGS_ID
            self._persist(SETTINGS_TABLE)
        self._notify_callbacks(SETTINGS_TABLE)

    def _upsert_local(self, table: str, record: Dict[str, Any]) -> None:
        field_name = get_spec(table).key_field
        key = record.get(field_name)
        rows = self._collections.setdefault(table, [])
        for index, existing in enumerate(rows):
            if existing.get(field_name) == key:
                rows[index] = record
                return
        rows.insert(0, record)

    # =========================================================================
    # WRITE OPERATIONS
    # =========================================================================

    def update_data(self, table: str, record: Dict[str, Any]) -> bool:
        """
        Upsert ``record`` into memory, mirror it locally, then remotely.

        Returns:
            False when the local mirror or the remote write failed. The
            in-memory change is kept either way.
        """
        if table == SETTINGS_TABLE:
            return self.update_settings(record)

        record = copy.deepcopy(record)
        with self._lock:
            self._upsert_local(table, record)
            persisted = self._persist(table)
        self._notify_callbacks(table)

        if not self.gateway.is_configured:
            return persisted

        try:
            result = self.gateway.upsert(table, record)
        except Exception as e:
            logger.error(f"Remote upsert to '{table}' raised: {e}")
            result = ServiceResult.fail(str(e), ResultCode.REMOTE_ERROR)

        self.last_result = result
        if result.error_code == ResultCode.SCHEMA_MISSING:
            logger.warning(f"Table '{table}' missing remotely; change kept locally")
        return persisted and result.success

    def delete_data(self, table: str, record_id: Any) -> bool:
        """Remove the record locally first, then remotely."""
        field_name = get_spec(table).key_field
        with self._lock:
            rows = self._collections.get(table, [])
            self._collections[table] = [r for r in rows if r.get(field_name) != record_id]
            persisted = self._persist(table)
        self._notify_callbacks(table)

        if not self.gateway.is_configured:
            return persisted

        try:
            result = self.gateway.delete(table, record_id, key_field=field_name)
        except Exception as e:
            logger.error(f"Remote delete from '{table}' raised: {e}")
            result = ServiceResult.fail(str(e), ResultCode.REMOTE_ERROR)

        self.last_result = result
        return persisted and result.success

    def update_settings(self, partial: Dict[str, Any]) -> bool:
        """Merge ``partial`` into the settings and upsert the singleton row."""
        self.tracker.set(SaveStatus.SAVING)
        with self._lock:
            self._settings.update(copy.deepcopy(partial))
            self._settings["id"] = SETTINGS_ID
            persisted = self._persist(SETTINGS_TABLE)
            row = copy.deepcopy(self._settings)
        self._notify_callbacks(SETTINGS_TABLE)

        success = persisted
        if self.gateway.is_configured:
            try:
                result = self.gateway.upsert(SETTINGS_TABLE, row)
            except Exception as e:
                logger.error(f"Remote settings upsert raised: {e}")
                result = ServiceResult.fail(str(e), ResultCode.REMOTE_ERROR)
            self.last_result = result
            success = success and result.success

        self.tracker.set(SaveStatus.SAVED if success else SaveStatus.ERROR)
        return success

    # =========================================================================
    # REFRESH
    # =========================================================================

    def _fetch(self, table: str) -> ServiceResult:
        """Runs on a refresh worker; the local fallback read opens a connection there."""
        try:
            return self.gateway.fetch_all(table)
        except Exception as e:
            logger.warning(f"Fetch of '{table}' raised: {e}")
            return ServiceResult.fail(str(e), ResultCode.REMOTE_ERROR)
        finally:
            self.local_store.release_thread_connection()

    def refresh_all_data(self, tables: Optional[List[str]] = None) -> Dict[str, ServiceResult]:
        """
        Re-fetch collections from the remote gateway in parallel.

        Each table is applied independently: a failed fetch keeps that
        table's previous in-memory value and never blocks the others.

        Args:
            tables: Tables to refresh (default: every public table)

        Returns:
            Dict of table name -> ServiceResult
        """
        tables = tables or public_tables()

        if not self.gateway.is_configured:
            return {
                table: ServiceResult.fallback(ResultCode.DISABLED, data=self.get(table))
                for table in tables
            }

        workers = max(1, min(self.config.refresh_workers, len(tables)))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="refresh") as pool:
            futures = {table: pool.submit(self._fetch, table) for table in tables}

        results: Dict[str, ServiceResult] = {}
        for table, future in futures.items():
            try:
                results[table] = future.result()
            except Exception as e:
                results[table] = ServiceResult.fail(str(e), ResultCode.REMOTE_ERROR)

        settings_result = results.get(SETTINGS_TABLE)
        if (
            settings_result is not None
            and settings_result.reached_remote
            and not settings_result.data
            and self.config.seed_empty_database
        ):
            self._seed_database()
        else:
            self._apply_results(results)

        if settings_result is not None:
            self.is_database_provisioned = settings_result.reached_remote

        failed = [t for t, r in results.items() if not r.success]
        if failed:
            logger.warning(f"Refresh kept previous values for: {', '.join(failed)}")
        return results

    def _apply_results(self, results: Dict[str, ServiceResult]) -> None:
        for table, result in results.items():
            if not result.reached_remote:
                continue
            if table == SETTINGS_TABLE:
                rows = result.data or []
                self._merge_settings(rows[0] if rows else None)
            else:
                self._replace_collection(table, result.data)

    def _seed_database(self) -> None:
        """Provision an empty backend with the default settings and catalogue."""
        logger.info("Detected fresh database. Commencing seed sequence...")
        self.tracker.set(SaveStatus.MIGRATING)

        settings_row = default_settings()
        jobs = {SETTINGS_TABLE: settings_row}
        jobs.update({table: copy.deepcopy(rows) for table, rows in SEED_DATA.items()})

        workers = max(1, min(self.config.refresh_workers, len(jobs)))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="seed") as pool:
            futures = {table: pool.submit(self.gateway.upsert, table, rows) for table, rows in jobs.items()}

        ok = True
        for table, future in futures.items():
            try:
                result = future.result()
            except Exception as e:
                result = ServiceResult.fail(str(e), ResultCode.REMOTE_ERROR)
            if not result.success:
                ok = False
                logger.error(f"Seeding '{table}' failed: {result.error}")

        # Seed data is applied locally regardless of the remote outcome
        with self._lock:
            self._settings = settings_row
            self._persist(SETTINGS_TABLE)
            for table, rows in SEED_DATA.items():
                self._collections[table] = copy.deepcopy(rows)
                self._persist(table)
        for table in jobs:
            self._notify_callbacks(table)

        self.tracker.set(SaveStatus.SAVED if ok else SaveStatus.ERROR)

    # =========================================================================
    # REALTIME
    # =========================================================================

    def apply_change_event(
        self,
        table: str,
        event_type: str,
        new: Optional[Dict[str, Any]] = None,
        old: Optional[Dict[str, Any]] = None,
    ) -> None:
        """
        Apply a realtime change notification to the in-memory collection.

        INSERT prepends when the key is absent, UPDATE replaces by key,
        DELETE removes by key. Settings merge only the global row.
        """
        event_type = (event_type or "").upper()

        if table == SETTINGS_TABLE:
            if new and new.get("id") == SETTINGS_ID:
                self._merge_settings(new)
            return

        field_name = get_spec(table).key_field
        with self._lock:
            rows = list(self._collections.get(table, []))
            if event_type == "INSERT" and new:
                if not any(r.get(field_name) == new.get(field_name) for r in rows):
                    rows.insert(0, new)
            elif event_type == "UPDATE" and new:
                rows = [new if r.get(field_name) == new.get(field_name) else r for r in rows]
            elif event_type == "DELETE" and old:
                rows = [r for r in rows if r.get(field_name) != old.get(field_name)]
            else:
                logger.debug(f"Ignoring {event_type or 'empty'} event for '{table}'")
                return
            self._collections[table] = rows
            self._persist(table)
        self._notify_callbacks(table)

    # =========================================================================
    # TRAFFIC
    # =========================================================================

    @error_boundary(default_return=None)
    def log_event(self, event_type: str, label: str, source: Optional[str] = None) -> Optional[Dict[str, Any]]:
        """
        Record a traffic event locally and, when configured, remotely.

        Best-effort: failures are logged and return None.

        Returns:
            The stored traffic log row
        """
        timestamp = now_ms()
        event = TrafficEvent(
            id=f"{timestamp}-{uuid.uuid4().hex[:6]}",
            type=event_type,
            text=f"Page View: {label}" if event_type == "view" else label,
            time=datetime.now().strftime("%H:%M:%S"),
            timestamp=timestamp,
            source=source,
        )
        record = event.to_record()

        with self._lock:
            rows = self._collections.setdefault("traffic_logs", [])
            rows.insert(0, record)
            del rows[self.MAX_TRAFFIC_LOGS:]
            self._persist("traffic_logs")

        if self.gateway.is_configured:
            result = self.gateway.insert("traffic_logs", [record])
            if not result.success:
                logger.debug(f"Traffic log not sent: {result.error}")
        return record
