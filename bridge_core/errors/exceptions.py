# =============================================================================
# bridge_core/errors/exceptions.py
# Storefront data-layer exceptions
# =============================================================================

from typing import Any, Dict, Optional


class BridgeError(Exception):
    """
    Base exception for the storefront data layer.

    Subclasses set ``code`` and ``recoverable`` as class attributes; any
    extra keyword context (table, key, area, order_id, ...) that is not
    None lands in ``details``.

    Attributes:
        message: Human-readable error description
        code: Machine-readable error code (e.g. "REMOTE_001")
        details: Additional context as a dictionary
        recoverable: Whether the caller can carry on (False for bad config)
    """

    code = "BRIDGE_000"
    recoverable = True

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        recoverable: Optional[bool] = None,
        **context: Any,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or type(self).code
        self.details = dict(details or {})
        self.details.update({k: v for k, v in context.items() if v is not None})
        if recoverable is not None:
            self.recoverable = recoverable

    def __str__(self) -> str:
        if not self.details:
            return f"[{self.code}] {self.message}"
        return f"[{self.code}] {self.message} | Details: {self.details}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error_type": type(self).__name__,
            "code": self.code,
            "message": self.message,
            "details": self.details,
            "recoverable": self.recoverable,
        }


# =============================================================================
# PERSISTENCE
# =============================================================================

class LocalStorageError(BridgeError):
    """The local key/value store rejected a write (context: key)."""
    code = "LOCAL_001"


class RemoteGatewayError(BridgeError):
    """A Supabase call failed (context: table, operation, remote_code)."""
    code = "REMOTE_001"


class SchemaMissingError(RemoteGatewayError):
    """The remote table has not been provisioned; callers fall back to local data."""
    code = "REMOTE_404"


# =============================================================================
# AUTH / COMMERCE
# =============================================================================

class AuthenticationError(BridgeError):
    """Login, registration or a permission check failed (context: area). Message is user-facing."""
    code = "AUTH_001"


class CheckoutError(BridgeError):
    """An order cannot be placed (context: order_id). Message is user-facing."""
    code = "CHECKOUT_001"


# =============================================================================
# CONFIGURATION
# =============================================================================

class ConfigurationError(BridgeError):
    """Credentials missing or malformed (context: config_key, expected_type)."""
    code = "CONFIG_001"
    recoverable = False
