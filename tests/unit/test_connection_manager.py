# =============================================================================
# tests/unit/test_connection_manager.py
# Unit Tests for ConnectionMonitor
# =============================================================================

import threading
from unittest.mock import MagicMock


def _gateway(*healths):
    gateway = MagicMock()
    gateway.measure_connection.side_effect = list(healths)
    return gateway


ONLINE = {"status": "online", "latency": 42, "message": "Supabase Sync Active", "schema_ready": True}
NO_SCHEMA = {"status": "online", "latency": 30, "message": "Connected (Schema Missing)", "schema_ready": False}
OFFLINE = {"status": "offline", "latency": 0, "message": "Missing Cloud Environment", "schema_ready": False}


class TestConnectionMonitor:

    def test_initial_state_unknown(self):
        from bridge_core.offline import ConnectionMonitor, ConnectionStatus

        monitor = ConnectionMonitor(_gateway())

        assert monitor.status == ConnectionStatus.UNKNOWN
        assert not monitor.is_online

    def test_online_check(self):
        from bridge_core.offline import ConnectionMonitor, ConnectionStatus

        monitor = ConnectionMonitor(_gateway(ONLINE))
        state = monitor.check_connection()

        assert state.status == ConnectionStatus.ONLINE
        assert state.latency_ms == 42
        assert state.last_online is not None

    def test_failures_are_counted(self):
        from bridge_core.offline import ConnectionMonitor

        monitor = ConnectionMonitor(_gateway(OFFLINE, OFFLINE, ONLINE))
        monitor.check_connection()
        monitor.check_connection()
        assert monitor.state.consecutive_failures == 2

        monitor.check_connection()
        assert monitor.state.consecutive_failures == 0

    def test_callbacks_fire_on_change_only(self):
        from bridge_core.offline import ConnectionMonitor, ConnectionStatus

        seen = []
        monitor = ConnectionMonitor(_gateway(ONLINE, ONLINE, OFFLINE))
        monitor.register_callback(lambda state: seen.append(state.status))

        for _ in range(3):
            monitor.check_connection()

        assert seen == [ConnectionStatus.ONLINE, ConnectionStatus.OFFLINE]

    def test_status_display(self):
        from bridge_core.offline import ConnectionMonitor

        monitor = ConnectionMonitor(_gateway(OFFLINE))
        monitor.check_connection()
        display = monitor.get_status_display()

        assert display["status"] == "offline"
        assert display["message"] == "Missing Cloud Environment"
        assert display["last_online"] is None
        assert display["sync_active"] is False
        assert display["average_latency_ms"] is None

    def test_schema_provisioning_is_reported(self):
        """Tables appearing on a reachable backend counts as a change"""
        from bridge_core.offline import ConnectionMonitor

        seen = []
        monitor = ConnectionMonitor(_gateway(NO_SCHEMA, NO_SCHEMA, ONLINE))
        monitor.register_callback(lambda state: seen.append(state.sync_active))

        for _ in range(3):
            monitor.check_connection()

        assert seen == [False, True]

    def test_average_latency_ignores_offline_probes(self):
        from bridge_core.offline import ConnectionMonitor

        monitor = ConnectionMonitor(_gateway(NO_SCHEMA, OFFLINE, ONLINE))
        for _ in range(3):
            monitor.check_connection()

        assert monitor.average_latency == 36

    def test_broken_listener_does_not_stop_others(self):
        from bridge_core.offline import ConnectionMonitor

        seen = []
        monitor = ConnectionMonitor(_gateway(ONLINE))
        monitor.register_callback(lambda state: 1 / 0)
        monitor.register_callback(seen.append)

        monitor.check_connection()

        assert len(seen) == 1

    def test_background_loop_probes_and_stops(self):
        from bridge_core.offline import ConnectionMonitor

        probed = threading.Event()
        gateway = MagicMock()

        def measure():
            probed.set()
            return ONLINE

        gateway.measure_connection.side_effect = measure
        monitor = ConnectionMonitor(gateway, interval=0.01)

        monitor.start_monitoring()
        assert probed.wait(timeout=2)
        monitor.stop_monitoring()

        assert monitor.is_online
        assert not monitor._monitor_thread.is_alive()

    def test_with_real_offline_gateway(self, offline_gateway):
        from bridge_core.offline import ConnectionMonitor, ConnectionStatus

        monitor = ConnectionMonitor(offline_gateway)

        assert monitor.check_connection().status == ConnectionStatus.OFFLINE
