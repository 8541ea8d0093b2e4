# =============================================================================
# bridge_core/logging/config.py
# Process-wide logging for the storefront data layer
# =============================================================================

import logging
import os
import sys
import time
from datetime import date
from pathlib import Path
from typing import Optional, Union


LOG_FORMAT = "%(asctime)s | %(name)s | %(levelname)s | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
LOG_LEVEL_ENV = "BRIDGE_LOG_LEVEL"

# Supabase pulls in httpx, gotrue, postgrest and storage3; each logs every request
QUIET_LOGGERS = ("urllib3", "httpx", "httpcore", "hpack", "supabase", "postgrest", "gotrue", "storage3")


def _resolve_level(level: Optional[Union[int, str]]) -> int:
    if level is None:
        level = os.environ.get(LOG_LEVEL_ENV, "INFO")
    if isinstance(level, str):
        return logging.getLevelName(level.strip().upper()) if level.strip() else logging.INFO
    return level


def setup_logging(
    level: Optional[Union[int, str]] = None,
    log_dir: Optional[Union[str, Path]] = None,
    log_filename: Optional[str] = None,
) -> None:
    """
    Configure the root logger for a storefront process.

    Args:
        level: Level name or number; defaults to $BRIDGE_LOG_LEVEL, then INFO
        log_dir: Also write a daily file (bridge_YYYY-MM-DD.log) here
        log_filename: Override the daily file name
    """
    resolved = _resolve_level(level)
    if not isinstance(resolved, int):
        resolved = logging.INFO

    handlers = [logging.StreamHandler(sys.stdout)]
    if log_dir is not None:
        folder = Path(log_dir)
        folder.mkdir(parents=True, exist_ok=True)
        name = log_filename or f"bridge_{date.today().isoformat()}.log"
        handlers.append(logging.FileHandler(folder / name, encoding="utf-8"))

    logging.basicConfig(
        level=resolved,
        format=LOG_FORMAT,
        datefmt=LOG_DATE_FORMAT,
        handlers=handlers,
        force=True,
    )
    for noisy in QUIET_LOGGERS:
        logging.getLogger(noisy).setLevel(logging.WARNING)

    logging.getLogger("bridge_core").debug(f"Logging configured at {logging.getLevelName(resolved)}")


def get_logger(name: str) -> logging.Logger:
    """
    Usage:
        logger = get_logger(__name__)
        logger.warning("Table 'enquiries' missing, using local copy")
    """
    return logging.getLogger(name)


class LogContext:
    """
    Time a block and log how it ended.

    Blocks slower than ``slow_after`` seconds are logged at WARNING so a
    sluggish Supabase round trip stands out. Exceptions are logged and
    re-raised.

    Usage:
        with LogContext(logger, "Refreshing storefront collections"):
            store.refresh_all_data()
    """

    def __init__(self, logger: logging.Logger, operation: str, slow_after: float = 3.0):
        self.logger = logger
        self.operation = operation
        self.slow_after = slow_after
        self.elapsed: Optional[float] = None
        self._started = 0.0

    def __enter__(self):
        self._started = time.perf_counter()
        self.logger.debug(f"{self.operation} started")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.elapsed = time.perf_counter() - self._started

        if exc_type is not None:
            self.logger.error(f"{self.operation} failed after {self.elapsed:.2f}s: {exc_val}", exc_info=True)
        elif self.elapsed > self.slow_after:
            self.logger.warning(f"{self.operation} slow: {self.elapsed:.2f}s")
        else:
            self.logger.info(f"{self.operation} done in {self.elapsed:.2f}s")
        return False
