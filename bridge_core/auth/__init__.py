"""
Authentication for the Bridge storefront.

Session guards for the admin portal and the client area, backed by
Supabase Auth when configured and by local session flags otherwise.
"""

from .session_gate import (
    SessionGate,
    hash_password,
    verify_password,
    ADMIN_AREA,
    CLIENT_AREA,
)
from .permissions import (
    PERMISSION_TREE,
    flatten_permissions,
    has_permission,
)

__all__ = [
    "SessionGate",
    "hash_password",
    "verify_password",
    "ADMIN_AREA",
    "CLIENT_AREA",
    "PERMISSION_TREE",
    "flatten_permissions",
    "has_permission",
]
