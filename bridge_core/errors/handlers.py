# =============================================================================
# bridge_core/errors/handlers.py
# Turning exceptions into log records and shopper-safe messages
# =============================================================================

from __future__ import annotations
import functools
from typing import Any, Callable, Dict, Optional, Type, TypeVar

from bridge_core.logging import get_logger
from .exceptions import (
    AuthenticationError,
    BridgeError,
    CheckoutError,
    LocalStorageError,
    RemoteGatewayError,
    SchemaMissingError,
)

logger = get_logger(__name__)

T = TypeVar("T")

GENERIC_USER_MESSAGE = "Something went wrong. Please try again."
CONNECTION_MESSAGE = "Connection interrupted. Please try again."

# Errors whose own message is written for the person at the keyboard
USER_FACING = (AuthenticationError, CheckoutError)

# Everything else is replaced; order matters (SchemaMissingError first)
USER_MESSAGES: Dict[Type[BridgeError], str] = {
    SchemaMissingError: "The online catalogue is not set up yet. Changes are kept on this device.",
    RemoteGatewayError: CONNECTION_MESSAGE,
    LocalStorageError: "Could not save on this device. Check the available storage.",
}


def user_message_for(error: Exception) -> str:
    """Message safe to show a shopper or admin for ``error``."""
    if isinstance(error, USER_FACING):
        return error.message
    for error_type, message in USER_MESSAGES.items():
        if isinstance(error, error_type):
            return message
    return GENERIC_USER_MESSAGE


def handle_error(
    error: Exception,
    log_error: bool = True,
    user_message: Optional[str] = None,
) -> str:
    """
    Log ``error`` and return what the UI should show.

    Backend detail (PostgREST messages, SQL, credentials in URLs) never
    reaches the returned text; it only goes to the log.

    Args:
        error: The exception to handle
        log_error: Whether to log the error
        user_message: Overrides the derived message

    Returns:
        User-facing message
    """
    if log_error:
        if isinstance(error, BridgeError):
            level = logger.warning if error.recoverable else logger.error
            level(f"[{error.code}] {error.message}", extra={"details": error.details})
        else:
            logger.error(f"[UNEXPECTED] {type(error).__name__}: {error}", exc_info=True)

    return user_message or user_message_for(error)


def error_boundary(default_return: Any = None, log: bool = True):
    """
    Decorator for best-effort side paths (traffic logging, telemetry):
    any exception is logged and ``default_return`` comes back instead.

    Usage:
        @error_boundary(default_return=None)
        def log_event(...):
            ...
    """
    def decorator(func: Callable[..., T]) -> Callable[..., Optional[T]]:
        @functools.wraps(func)
        def wrapper(*args, **kwargs) -> Optional[T]:
            try:
                return func(*args, **kwargs)
            except Exception as e:
                if log:
                    logger.error(f"{func.__qualname__} swallowed {type(e).__name__}: {e}", exc_info=True)
                return default_return

        return wrapper

    return decorator
