# =============================================================================
# bridge_core/services/base_service.py
# ServiceResult and the BaseService every storefront service extends
# =============================================================================

from __future__ import annotations
from abc import ABC
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional

from bridge_core.errors import BridgeError, handle_error
from bridge_core.logging import LogContext, get_logger


class ResultCode:
    """
    ``error_code`` values.

    DISABLED and SCHEMA_MISSING ride on *successful* results: the data was
    served from the local store instead of Supabase. Everything else marks
    a failure.
    """
    DISABLED = "DISABLED"
    SCHEMA_MISSING = "SCHEMA_MISSING"
    REMOTE_ERROR = "REMOTE_ERROR"
    EXCEPTION = "EXCEPTION"
    VALIDATION = "VALIDATION"
    NOT_FOUND = "NOT_FOUND"
    AUTH_ERROR = "AUTH_ERROR"

    LOCAL_FALLBACKS = (DISABLED, SCHEMA_MISSING)


@dataclass
class ServiceResult:
    """
    Outcome of a gateway or service call.

    Three shapes matter to callers:

    - reached the backend: ``success`` and no ``error_code``
    - fell back to local data: ``success`` with DISABLED / SCHEMA_MISSING
    - failed: not ``success``; ``error`` is safe to show a shopper or admin
    """
    success: bool
    data: Any = None
    error: Optional[str] = None
    error_code: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    def __bool__(self) -> bool:
        return self.success

    @property
    def source(self) -> Optional[str]:
        return self.metadata.get("source")

    @property
    def reached_remote(self) -> bool:
        return self.success and self.error_code is None

    @property
    def used_fallback(self) -> bool:
        return self.success and self.error_code in ResultCode.LOCAL_FALLBACKS

    @classmethod
    def ok(cls, data: Any = None, metadata: Optional[Dict[str, Any]] = None) -> ServiceResult:
        return cls(True, data, metadata=dict(metadata or {}))

    @classmethod
    def fallback(
        cls,
        error_code: str,
        data: Any = None,
        error: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> ServiceResult:
        """Success served from the local store (``source`` is 'local')."""
        return cls(True, data, error, error_code, {"source": "local", **(metadata or {})})

    @classmethod
    def fail(
        cls,
        error: str,
        error_code: str = "UNKNOWN",
        data: Any = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> ServiceResult:
        return cls(False, data, error, error_code, dict(metadata or {}))

    @classmethod
    def from_exception(cls, e: Exception) -> ServiceResult:
        # BridgeErrors carry a user-facing message; anything else is raw
        if isinstance(e, BridgeError):
            return cls.fail(e.message, e.code, metadata=e.details)
        return cls.fail(str(e), ResultCode.EXCEPTION)


class BaseService(ABC):
    """
    Shared plumbing for the storefront services: a per-class logger, timed
    operation blocks and an exception-to-ServiceResult wrapper.
    """

    def __init__(self):
        self.logger = get_logger(f"bridge_core.services.{type(self).__name__}")

    def log_operation(self, operation: str) -> LogContext:
        """
        Usage:
            with self.log_operation("Placing order ORD-123456"):
                ...
        """
        return LogContext(self.logger, operation)

    def safe_execute(self, operation: str, func: Callable[..., Any], *args, **kwargs) -> ServiceResult:
        """Run ``func`` inside a timed block; exceptions become failed results."""
        try:
            with self.log_operation(operation):
                value = func(*args, **kwargs)
        except BridgeError as e:
            handle_error(e)
            return ServiceResult.from_exception(e)
        except Exception as e:
            self.logger.error(f"{operation} failed: {e}", exc_info=True)
            return ServiceResult.from_exception(e)
        return ServiceResult.ok(value)
