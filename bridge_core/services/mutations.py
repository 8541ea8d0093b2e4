# =============================================================================
# bridge_core/services/mutations.py
# Optimistic Mutation Wrapper and Save Status Indicator
# =============================================================================
"""
Admin edits are applied locally first, then written remotely.

    tracker = SaveStatusTracker(reset_seconds=2.0)
    mutator = OptimisticMutator(store, gateway, tracker)
    mutator.perform_save(lambda: products.insert(0, p), "products", p)

There is no rollback: when the remote write fails the local change stays
in place and the status turns to ``error`` until the next save. Local and
remote state stay diverged until a later refresh_all_data() succeeds.
"""

from __future__ import annotations
import threading
import time
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Optional
import logging

from bridge_core.models import SaveStatus
from bridge_core.services.base_service import ServiceResult

if TYPE_CHECKING:
    from bridge_core.offline.remote_gateway import RemoteGateway
    from bridge_core.offline.sync_store import SyncStore

logger = logging.getLogger(__name__)


class SaveStatusTracker:
    """
    Shared idle/saving/saved/error indicator.

    ``saved`` falls back to ``idle`` after ``reset_seconds``; ``error``
    stays until the next status change. ``reset_seconds=None`` disables
    the timer.
    """

    AUTO_RESET = (SaveStatus.SAVED, SaveStatus.MIGRATING)

    def __init__(self, reset_seconds: Optional[float] = 2.0):
        self.reset_seconds = reset_seconds
        self._status = SaveStatus.IDLE
        self._listeners: List[Callable[[SaveStatus], None]] = []
        self._timer: Optional[threading.Timer] = None
        self._lock = threading.Lock()

    @property
    def status(self) -> SaveStatus:
        return self._status

    def add_listener(self, listener: Callable[[SaveStatus], None]) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: Callable[[SaveStatus], None]) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def set(self, status: SaveStatus) -> None:
        """Change status, notify listeners and (re)arm the reset timer."""
        with self._lock:
            self._cancel_timer()
            changed = status != self._status
            self._status = status
            if status == SaveStatus.SAVED and self.reset_seconds is not None:
                self._timer = threading.Timer(self.reset_seconds, self._auto_reset)
                self._timer.daemon = True
                self._timer.start()

        if changed:
            self._notify(status)

    def _auto_reset(self) -> None:
        with self._lock:
            if self._status not in self.AUTO_RESET:
                return
            self._status = SaveStatus.IDLE
            self._timer = None
        self._notify(SaveStatus.IDLE)

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _notify(self, status: SaveStatus) -> None:
        for listener in self._listeners:
            try:
                listener(status)
            except Exception as e:
                logger.error(f"Save status listener error: {e}")

    def stop(self) -> None:
        with self._lock:
            self._cancel_timer()


class OptimisticMutator:
    """
    Wraps every admin CRUD action: local change, remote write, refresh.

    Usage:
        ok = mutator.perform_save(apply_locally, "products", product)
        ok = mutator.perform_save(remove_locally, "products", delete_id="p1")
    """

    def __init__(
        self,
        store: SyncStore,
        gateway: RemoteGateway,
        tracker: Optional[SaveStatusTracker] = None,
        local_delay: float = 0.6,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Args:
            store: Sync orchestrator refreshed after remote writes
            gateway: Remote gateway used for the write
            tracker: Status indicator (the store's tracker by default)
            local_delay: Pause before ``saved`` in local-only mode
            sleep: Injected for tests
        """
        self.store = store
        self.gateway = gateway
        self.tracker = tracker or store.tracker
        self.local_delay = local_delay
        self._sleep = sleep
        self.last_error: Optional[str] = None

    @property
    def status(self) -> SaveStatus:
        return self.tracker.status

    def perform_save(
        self,
        local_action: Callable[[], Any],
        table: Optional[str] = None,
        data: Optional[Dict[str, Any]] = None,
        delete_id: Optional[Any] = None,
    ) -> bool:
        """
        Run ``local_action`` then mirror the change remotely.

        Args:
            local_action: Synchronous local state change
            table: Remote table to write (None for local-only changes)
            data: Row to upsert
            delete_id: Key of the row to delete instead of upserting

        Returns:
            True when the change is considered saved. Never raises.
        """
        self.tracker.set(SaveStatus.SAVING)
        self.last_error = None

        try:
            local_action()

            if self.gateway.is_configured and table:
                if delete_id is not None:
                    result = self.gateway.delete(table, delete_id)
                elif data is not None:
                    result = self.gateway.upsert(table, data)
                else:
                    result = ServiceResult.ok()

                # Read side catches up with the server either way
                self.store.refresh_all_data()

                if not result.success:
                    self.last_error = result.error
                    logger.error(f"Save to '{table}' failed: {result.error}")
                    self.tracker.set(SaveStatus.ERROR)
                    return False
            else:
                self._sleep(self.local_delay)

            self.tracker.set(SaveStatus.SAVED)
            return True

        except Exception as e:
            self.last_error = str(e)
            logger.error(f"Save failed: {e}", exc_info=True)
            self.tracker.set(SaveStatus.ERROR)
            return False
