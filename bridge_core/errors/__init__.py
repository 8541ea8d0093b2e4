# =============================================================================
# bridge_core/errors/__init__.py
# Exceptions and handlers for the storefront data layer
# =============================================================================

from .exceptions import (
    BridgeError,
    LocalStorageError,
    RemoteGatewayError,
    SchemaMissingError,
    AuthenticationError,
    CheckoutError,
    ConfigurationError,
)

from .handlers import (
    CONNECTION_MESSAGE,
    GENERIC_USER_MESSAGE,
    handle_error,
    user_message_for,
    error_boundary,
)

__all__ = [
    "BridgeError",
    "LocalStorageError",
    "RemoteGatewayError",
    "SchemaMissingError",
    "AuthenticationError",
    "CheckoutError",
    "ConfigurationError",
    "CONNECTION_MESSAGE",
    "GENERIC_USER_MESSAGE",
    "handle_error",
    "user_message_for",
    "error_boundary",
]
