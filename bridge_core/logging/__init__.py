# =============================================================================
# bridge_core/logging/__init__.py
# Logging setup shared by the data layer, services and scripts
# =============================================================================

from .config import LOG_LEVEL_ENV, LogContext, get_logger, setup_logging

__all__ = ["setup_logging", "get_logger", "LogContext", "LOG_LEVEL_ENV"]
