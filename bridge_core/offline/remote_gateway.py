# =============================================================================
# bridge_core/offline/remote_gateway.py
# Remote Gateway - Supabase CRUD with graceful local fallback
# =============================================================================
"""
RemoteGateway - thin wrapper over the Supabase table, storage and auth APIs.

Every call returns a ServiceResult and never raises:
- remote not configured  -> DISABLED, local value served
- table missing (42P01)  -> SCHEMA_MISSING, local value served
- anything else          -> REMOTE_ERROR (reads still serve the local value)
"""

from __future__ import annotations
import mimetypes
import re
import shutil
import time
import uuid
from pathlib import Path
from typing import Any, Dict, List, Optional, Union
import logging

from bridge_core.errors import RemoteGatewayError, SchemaMissingError
from bridge_core.models import get_spec, key_field as registry_key_field
from bridge_core.services.base_service import ServiceResult, ResultCode
from bridge_core.offline.local_store import LocalStore

logger = logging.getLogger(__name__)

# PostgREST / Postgres codes for "relation does not exist"
SCHEMA_MISSING_CODES = {"42P01", "PGRST205", "PGRST106"}
SCHEMA_MISSING_MESSAGE = re.compile(
    r"Could not find the table|relation \S+ does not exist", re.IGNORECASE
)


def _http_status(error: Exception) -> Optional[int]:
    """Status code carried by the error or its HTTP response, if any."""
    for source in (error, getattr(error, "response", None)):
        for attr in ("status_code", "status"):
            value = getattr(source, attr, None)
            if isinstance(value, int) and not isinstance(value, bool):
                return value
    return None


def is_schema_missing(error: Exception) -> bool:
    """True when ``error`` means the remote table is absent."""
    code = getattr(error, "code", None)
    if code in SCHEMA_MISSING_CODES:
        return True
    if _http_status(error) == 404:
        return True
    message = getattr(error, "message", None) or str(error)
    return bool(SCHEMA_MISSING_MESSAGE.search(message))


def _error_message(error: Exception) -> str:
    return getattr(error, "message", None) or str(error) or error.__class__.__name__


class RemoteGateway:
    """
    Gateway to the Supabase backend for one storefront.

    Usage:
        gateway = RemoteGateway(client, local_store)
        result = gateway.fetch_all("products")
        if result.error_code == ResultCode.SCHEMA_MISSING:
            ...  # table not provisioned, result.data is the local copy
    """

    BATCH_SIZE = 1000
    PROBE_TABLE = "settings"

    def __init__(
        self,
        client: Any,
        local_store: LocalStore,
        configured: Optional[bool] = None,
        media_dir: Optional[Union[str, Path]] = None,
        media_bucket: str = "media",
    ):
        """
        Args:
            client: Supabase client (None when not configured)
            local_store: Local persistence used for fallbacks
            configured: Override; defaults to ``client is not None``
            media_dir: Directory for local media copies
            media_bucket: Public storage bucket for uploads
        """
        self.client = client
        self.local_store = local_store
        if configured is None:
            configured = client is not None
        self._configured = bool(configured) and client is not None
        self.media_dir = Path(media_dir) if media_dir else Path("local_data") / "media"
        self.media_bucket = media_bucket

    @classmethod
    def from_config(cls, config, local_store: LocalStore) -> RemoteGateway:
        """Build a gateway from a StoreConfig."""
        from bridge_core.data import get_supabase_client

        client = get_supabase_client(config)
        return cls(
            client,
            local_store,
            configured=config.remote_configured,
            media_dir=config.media_dir,
            media_bucket=config.media_bucket,
        )

    @property
    def is_configured(self) -> bool:
        """Fixed at construction; never re-evaluated."""
        return self._configured

    # =========================================================================
    # LOCAL FALLBACK
    # =========================================================================

    def _local_rows(self, table: str) -> List[Dict[str, Any]]:
        value = self.local_store.get(get_spec(table).local_key, [])
        if isinstance(value, dict):
            return [value]
        if isinstance(value, list):
            return value
        logger.warning(f"Local value for '{table}' is not a collection; ignoring it")
        return []

    def _failure(self, table: str, operation: str, error: Exception, data: Any = None) -> ServiceResult:
        """Classify ``error`` into SCHEMA_MISSING (soft) or REMOTE_ERROR."""
        message = _error_message(error)
        if is_schema_missing(error):
            missing = SchemaMissingError(message, table=table, operation=operation)
            logger.warning(f"Supabase table '{table}' not found; skipping cloud {operation}")
            return ServiceResult.fallback(
                ResultCode.SCHEMA_MISSING, data=data, error=missing.message, metadata=missing.details
            )

        failure = RemoteGatewayError(
            message, table=table, operation=operation, remote_code=getattr(error, "code", None)
        )
        logger.warning(f"Supabase {operation} on '{table}' failed: {message}")
        meta = dict(failure.details, source="local" if data is not None else "remote")
        return ServiceResult.fail(failure.message, ResultCode.REMOTE_ERROR, data=data, metadata=meta)

    # =========================================================================
    # TABLE OPERATIONS
    # =========================================================================

    def fetch_all(self, table: str) -> ServiceResult:
        """
        Fetch every row of ``table``.

        Pages through the 1000 row response limit. ``data`` is always a list;
        on any failure it is the local collection.
        """
        if not self.is_configured:
            return ServiceResult.fallback(ResultCode.DISABLED, data=self._local_rows(table))

        try:
            rows: List[Dict[str, Any]] = []
            offset = 0
            while True:
                response = (
                    self.client.table(table)
                    .select("*")
                    .range(offset, offset + self.BATCH_SIZE - 1)
                    .execute()
                )
                batch = response.data or []
                rows.extend(batch)
                if len(batch) < self.BATCH_SIZE:
                    break
                offset += self.BATCH_SIZE
        except Exception as e:
            return self._failure(table, "fetch", e, data=self._local_rows(table))

        return ServiceResult.ok(rows, metadata={"source": "remote", "table": table})

    def fetch_one(self, table: str, column: str, value: Any) -> ServiceResult:
        """First row where ``column == value`` (``data`` is None if absent)."""
        if not self.is_configured:
            match = next((r for r in self._local_rows(table) if r.get(column) == value), None)
            return ServiceResult.fallback(ResultCode.DISABLED, data=match)

        try:
            response = self.client.table(table).select("*").eq(column, value).limit(1).execute()
        except Exception as e:
            return self._failure(table, "fetch", e)

        rows = response.data or []
        return ServiceResult.ok(rows[0] if rows else None, metadata={"source": "remote", "table": table})

    def upsert(self, table: str, row: Union[Dict[str, Any], List[Dict[str, Any]]]) -> ServiceResult:
        """Insert-or-replace ``row`` (or a batch) by primary key."""
        if not self.is_configured:
            return ServiceResult.fallback(ResultCode.DISABLED)

        try:
            response = self.client.table(table).upsert(row).execute()
        except Exception as e:
            return self._failure(table, "upsert", e)

        return ServiceResult.ok(response.data or [], metadata={"source": "remote", "table": table})

    def delete(self, table: str, record_id: Any, key_field: Optional[str] = None) -> ServiceResult:
        """Delete the row whose key equals ``record_id``."""
        if not self.is_configured:
            return ServiceResult.fallback(ResultCode.DISABLED)

        field_name = key_field or registry_key_field(table)
        try:
            self.client.table(table).delete().eq(field_name, record_id).execute()
        except Exception as e:
            return self._failure(table, "delete", e)

        return ServiceResult.ok(record_id, metadata={"source": "remote", "table": table})

    def insert(self, table: str, rows: Union[Dict[str, Any], List[Dict[str, Any]]]) -> ServiceResult:
        """Plain insert (append-only tables such as order_items, traffic_logs)."""
        if not self.is_configured:
            return ServiceResult.fallback(ResultCode.DISABLED)

        if isinstance(rows, list) and not rows:
            return ServiceResult.ok([])

        try:
            response = self.client.table(table).insert(rows).execute()
        except Exception as e:
            return self._failure(table, "insert", e)

        return ServiceResult.ok(response.data or [], metadata={"source": "remote", "table": table})

    def count(self, table: str) -> ServiceResult:
        """Exact row count; local collection size when not remote."""
        if not self.is_configured:
            return ServiceResult.fallback(ResultCode.DISABLED, data=len(self._local_rows(table)))

        try:
            response = self.client.table(table).select("*", count="exact").limit(1).execute()
        except Exception as e:
            result = self._failure(table, "count", e)
            if result.success:
                result.data = len(self._local_rows(table))
            return result

        total = response.count if response.count is not None else len(response.data or [])
        return ServiceResult.ok(total, metadata={"source": "remote", "table": table})

    def migrate_local_to_cloud(self, table: str) -> ServiceResult:
        """
        First-time migration: batch upsert the local collection remotely.

        Returns:
            ServiceResult whose data is the number of rows sent
        """
        if not self.is_configured:
            return ServiceResult.fallback(ResultCode.DISABLED, data=0)

        rows = self._local_rows(table)
        if not rows:
            return ServiceResult.ok(0, metadata={"table": table})

        logger.info(f"Migrating {len(rows)} items from {get_spec(table).local_key} to {table}...")
        result = self.upsert(table, rows)
        if result.reached_remote:
            logger.info(f"Migration success for {table}")
            return ServiceResult.ok(len(rows), metadata={"source": "remote", "table": table})
        result.data = 0
        return result

    # =========================================================================
    # STORAGE
    # =========================================================================

    def _store_locally(self, source: Path) -> str:
        self.media_dir.mkdir(parents=True, exist_ok=True)
        target = self.media_dir / f"{uuid.uuid4().hex[:12]}{source.suffix}"
        shutil.copyfile(source, target)
        return target.resolve().as_uri()

    def upload_media(self, path: Union[str, Path], bucket: Optional[str] = None) -> ServiceResult:
        """
        Upload a file to the public media bucket.

        Returns:
            ServiceResult whose data is the public URL, or a ``file://`` URI
            of a local copy when the upload is skipped or fails
        """
        source = Path(path)
        if not source.exists():
            return ServiceResult.fail(f"File not found: {source}", "FILE_NOT_FOUND")

        if not self.is_configured:
            return ServiceResult.fallback(ResultCode.DISABLED, data=self._store_locally(source))

        bucket = bucket or self.media_bucket
        remote_name = f"{uuid.uuid4().hex[:12]}{source.suffix}"
        content_type = mimetypes.guess_type(source.name)[0] or "application/octet-stream"
        try:
            storage = self.client.storage.from_(bucket)
            storage.upload(remote_name, source.read_bytes(), {"content-type": content_type})
            public = storage.get_public_url(remote_name)
        except Exception as e:
            logger.error(f"Upload failed, falling back to local copy: {e}")
            return ServiceResult.fallback(
                ResultCode.REMOTE_ERROR,
                data=self._store_locally(source),
                error=_error_message(e),
            )

        url = public if isinstance(public, str) else public.get("publicUrl") or public.get("publicURL")
        return ServiceResult.ok(url, metadata={"source": "remote", "bucket": bucket})

    # =========================================================================
    # DIAGNOSTICS
    # =========================================================================

    def measure_connection(self) -> Dict[str, Any]:
        """
        Probe the backend with a one-row settings query.

        Returns:
            Dict with status ("online"/"offline"), latency (ms), message and
            schema_ready (False when the tables are not provisioned yet)
        """
        def health(status, latency, message, schema_ready=False):
            return {"status": status, "latency": latency, "message": message, "schema_ready": schema_ready}

        if not self.is_configured:
            return health("offline", 0, "Missing Cloud Environment")

        start = time.perf_counter()
        try:
            self.client.table(self.PROBE_TABLE).select("companyName").limit(1).execute()
        except Exception as e:
            if is_schema_missing(e):
                latency = int(round((time.perf_counter() - start) * 1000))
                return health("online", latency, "Connected (Schema Missing)")
            return health("offline", 0, _error_message(e) or "Connection Failed")

        latency = int(round((time.perf_counter() - start) * 1000))
        return health("online", latency, "Supabase Sync Active", schema_ready=True)
