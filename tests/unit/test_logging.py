# =============================================================================
# tests/unit/test_logging.py
# Unit Tests for setup_logging and LogContext
# =============================================================================

import logging

import pytest


@pytest.fixture(autouse=True)
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers = handlers
    root.setLevel(level)


class TestSetupLogging:

    def test_level_from_environment(self, monkeypatch):
        from bridge_core.logging import LOG_LEVEL_ENV, setup_logging

        monkeypatch.setenv(LOG_LEVEL_ENV, "debug")
        setup_logging()

        assert logging.getLogger().level == logging.DEBUG

    def test_unknown_level_name_falls_back_to_info(self):
        from bridge_core.logging import setup_logging

        setup_logging(level="chatty")

        assert logging.getLogger().level == logging.INFO

    def test_daily_file_written(self, tmp_path):
        from bridge_core.logging import setup_logging

        setup_logging(level=logging.INFO, log_dir=tmp_path / "logs", log_filename="store.log")
        logging.getLogger("bridge_core.test").info("order placed")
        for handler in logging.getLogger().handlers:
            handler.flush()

        assert "order placed" in (tmp_path / "logs" / "store.log").read_text(encoding="utf-8")

    def test_supabase_internals_quietened(self):
        from bridge_core.logging import setup_logging

        setup_logging(level=logging.DEBUG)

        assert logging.getLogger("httpx").level == logging.WARNING
        assert logging.getLogger("postgrest").level == logging.WARNING


class TestLogContext:

    def test_records_elapsed(self, caplog):
        from bridge_core.logging import LogContext

        logger = logging.getLogger("bridge_core.test")
        with caplog.at_level(logging.INFO, logger="bridge_core.test"):
            with LogContext(logger, "Refreshing storefront collections") as ctx:
                pass

        assert ctx.elapsed is not None
        assert "Refreshing storefront collections done" in caplog.text

    def test_slow_block_warns(self, caplog):
        from bridge_core.logging import LogContext

        logger = logging.getLogger("bridge_core.test")

        with caplog.at_level(logging.INFO, logger="bridge_core.test"):
            with LogContext(logger, "Seeding remote catalogue", slow_after=-1):
                pass

        assert any(r.levelno == logging.WARNING and "slow" in r.message for r in caplog.records)

    def test_exceptions_propagate(self):
        from bridge_core.logging import LogContext

        with pytest.raises(ValueError):
            with LogContext(logging.getLogger("bridge_core.test"), "Placing order"):
                raise ValueError("boom")
