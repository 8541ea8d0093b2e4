# =============================================================================
# bridge_core/offline/connection_manager.py
# Cloud sync health for the admin system panel
# =============================================================================
"""
ConnectionMonitor polls RemoteGateway.measure_connection() and keeps the
latest reading plus a short latency history. Listeners hear about changes
of status and about the schema becoming (un)available, so the admin panel
can switch between "Supabase Sync Active", "Connected (Schema Missing)"
and "Missing Cloud Environment" without polling itself.
"""

from __future__ import annotations
import threading
from collections import deque
from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable, Deque, List, Optional
import logging

from bridge_core.models import now_ms
from bridge_core.offline.remote_gateway import RemoteGateway

logger = logging.getLogger(__name__)


class ConnectionStatus(Enum):
    ONLINE = "online"      # backend answered, possibly without tables
    OFFLINE = "offline"    # unconfigured or unreachable
    UNKNOWN = "unknown"    # not probed yet


@dataclass(frozen=True)
class ConnectionState:
    """One probe reading. Timestamps are epoch milliseconds."""
    status: ConnectionStatus = ConnectionStatus.UNKNOWN
    latency_ms: int = 0
    message: str = ""
    schema_ready: bool = False
    checked_at: Optional[int] = None
    last_online: Optional[int] = None
    consecutive_failures: int = 0

    @property
    def sync_active(self) -> bool:
        return self.status == ConnectionStatus.ONLINE and self.schema_ready


StateListener = Callable[[ConnectionState], None]


class ConnectionMonitor:
    """
    Usage:
        monitor = ConnectionMonitor(gateway)
        monitor.register_callback(lambda state: print(state.message))
        monitor.start_monitoring()
        ...
        monitor.stop_monitoring()
    """

    CHECK_INTERVAL = 10.0
    HISTORY_SIZE = 20

    def __init__(self, gateway: RemoteGateway, interval: Optional[float] = None):
        self.gateway = gateway
        self.interval = self.CHECK_INTERVAL if interval is None else interval
        self._state = ConnectionState()
        self._latencies: Deque[int] = deque(maxlen=self.HISTORY_SIZE)
        self._listeners: List[StateListener] = []
        self._lock = threading.Lock()
        self._halt = threading.Event()
        self._monitor_thread: Optional[threading.Thread] = None

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def status(self) -> ConnectionStatus:
        return self._state.status

    @property
    def is_online(self) -> bool:
        return self._state.status == ConnectionStatus.ONLINE

    @property
    def average_latency(self) -> Optional[float]:
        """Mean latency over recent online probes (None before the first one)."""
        with self._lock:
            if not self._latencies:
                return None
            return sum(self._latencies) / len(self._latencies)

    def check_connection(self) -> ConnectionState:
        """Probe once, record the reading and notify listeners on change."""
        health = self.gateway.measure_connection()
        stamp = now_ms()
        online = health.get("status") == ConnectionStatus.ONLINE.value

        with self._lock:
            previous = self._state
            self._state = replace(
                previous,
                status=ConnectionStatus.ONLINE if online else ConnectionStatus.OFFLINE,
                latency_ms=int(health.get("latency", 0)),
                message=health.get("message", ""),
                schema_ready=bool(health.get("schema_ready", False)),
                checked_at=stamp,
                last_online=stamp if online else previous.last_online,
                consecutive_failures=0 if online else previous.consecutive_failures + 1,
            )
            if online:
                self._latencies.append(self._state.latency_ms)
            current = self._state

        if (previous.status, previous.schema_ready) != (current.status, current.schema_ready):
            logger.info(f"Cloud sync: {previous.status.value} -> {current.status.value} ({current.message})")
            self._notify_callbacks(current)
        elif not online and current.consecutive_failures % 6 == 0:
            logger.warning(f"Backend still unreachable after {current.consecutive_failures} probes")

        return current

    # =========================================================================
    # BACKGROUND LOOP
    # =========================================================================

    def start_monitoring(self) -> None:
        if self._monitor_thread is not None and self._monitor_thread.is_alive():
            return
        self._halt.clear()
        self._monitor_thread = threading.Thread(target=self._run, daemon=True, name="ConnectionMonitor")
        self._monitor_thread.start()

    def stop_monitoring(self, timeout: float = 5.0) -> None:
        self._halt.set()
        if self._monitor_thread is not None:
            self._monitor_thread.join(timeout=timeout)

    def _run(self) -> None:
        while not self._halt.is_set():
            try:
                self.check_connection()
            except Exception as e:
                logger.error(f"Connection probe failed: {e}")
            self._halt.wait(self.interval)

    # =========================================================================
    # LISTENERS
    # =========================================================================

    def register_callback(self, callback: StateListener) -> None:
        if callback not in self._listeners:
            self._listeners.append(callback)

    def unregister_callback(self, callback: StateListener) -> None:
        if callback in self._listeners:
            self._listeners.remove(callback)

    def _notify_callbacks(self, state: ConnectionState) -> None:
        for listener in list(self._listeners):
            try:
                listener(state)
            except Exception as e:
                logger.error(f"Connection listener raised: {e}")

    def get_status_display(self) -> dict:
        """Reading shaped for the admin system panel."""
        state = self._state
        return {
            "status": state.status.value,
            "message": state.message,
            "latency_ms": state.latency_ms,
            "average_latency_ms": self.average_latency,
            "sync_active": state.sync_active,
            "last_check": state.checked_at,
            "last_online": state.last_online,
            "failures": state.consecutive_failures,
        }
