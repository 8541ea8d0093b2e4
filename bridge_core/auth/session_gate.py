# =============================================================================
# bridge_core/auth/session_gate.py
# Admin / client session gate
# =============================================================================
"""
Two guard predicates, one per protected area:

- remote mode: a Supabase auth session is present
- local mode:  a session flag key exists in the local store

Token validation, refresh and expiry stay with the auth provider. Passwords
kept locally (admin team members, local client accounts) are bcrypt hashes.
"""

from __future__ import annotations
import uuid
from typing import TYPE_CHECKING, Any, Dict, Optional
import logging

import bcrypt

from bridge_core.auth.permissions import has_permission
from bridge_core.errors import AuthenticationError
from bridge_core.models import (
    ADMIN_SESSION_KEY,
    CLIENT_SESSION_KEY,
    AdminRole,
    now_ms,
)

if TYPE_CHECKING:
    from bridge_core.offline.local_store import LocalStore
    from bridge_core.offline.remote_gateway import RemoteGateway

logger = logging.getLogger(__name__)

ADMIN_AREA = "admin"
CLIENT_AREA = "client"

INVALID_CREDENTIALS = "Incorrect email or password. Please verify your credentials."


def hash_password(password: str) -> str:
    """
    Hash a password using bcrypt.

    Example:
        >>> hash_password("mypassword123")
        '$2b$12$...'
    """
    return bcrypt.hashpw(password.encode(), bcrypt.gensalt()).decode()


def verify_password(password: str, hashed: Optional[str]) -> bool:
    """Check ``password`` against a bcrypt hash (False for anything else)."""
    if not password or not hashed:
        return False
    try:
        return bcrypt.checkpw(password.encode(), hashed.encode())
    except ValueError:
        # Not a bcrypt hash
        return False


def _user_dict(user: Any) -> Dict[str, Any]:
    """Plain dict view of a Supabase auth user."""
    if isinstance(user, dict):
        return user
    return {
        "id": getattr(user, "id", None),
        "email": getattr(user, "email", None),
        "user_metadata": getattr(user, "user_metadata", None) or {},
    }


def _auth_message(error: Exception) -> str:
    message = getattr(error, "message", None) or str(error)
    if message == "Invalid login credentials":
        return INVALID_CREDENTIALS
    return message


class SessionGate:
    """
    Auth/session gate for the admin portal and the client account area.

    Usage:
        gate = SessionGate(gateway, local_store)
        gate.admin_login("owner@example.com", "secret")
        if gate.is_admin_authenticated():
            ...
    """

    def __init__(self, gateway: RemoteGateway, local_store: LocalStore):
        self.gateway = gateway
        self.local_store = local_store
        self._user: Optional[Dict[str, Any]] = None
        self._admin_profile: Optional[Dict[str, Any]] = None

    @property
    def client(self):
        return self.gateway.client

    @property
    def is_local_mode(self) -> bool:
        return not self.gateway.is_configured

    @property
    def current_user(self) -> Optional[Dict[str, Any]]:
        if self.is_local_mode:
            return self.local_store.get(ADMIN_SESSION_KEY) or self.local_store.get(CLIENT_SESSION_KEY)
        return self._remote_user()

    @property
    def admin_profile(self) -> Optional[Dict[str, Any]]:
        return self._admin_profile

    # =========================================================================
    # GUARDS
    # =========================================================================

    def _remote_user(self) -> Optional[Dict[str, Any]]:
        if self._user is not None:
            return self._user
        try:
            session = self.client.auth.get_session()
        except Exception as e:
            logger.error(f"Authentication check failed: {e}")
            return None
        if session is not None and getattr(session, "user", None) is not None:
            self._user = _user_dict(session.user)
        return self._user

    def is_admin_authenticated(self) -> bool:
        if self.is_local_mode:
            return self.local_store.has(ADMIN_SESSION_KEY)
        return self._remote_user() is not None

    def is_client_authenticated(self) -> bool:
        if self.is_local_mode:
            return self.local_store.has(CLIENT_SESSION_KEY)
        return self._remote_user() is not None

    # =========================================================================
    # ADMIN
    # =========================================================================

    def admin_login(self, email: str, password: str) -> Dict[str, Any]:
        """
        Sign an administrator in.

        Returns:
            The admin profile (role, permissions)

        Raises:
            AuthenticationError: credentials rejected (never retried)
        """
        email = (email or "").strip().lower()
        if not email or not password:
            raise AuthenticationError("Email and password are required.", area=ADMIN_AREA)

        if self.is_local_mode:
            return self._local_admin_login(email, password)

        try:
            response = self.client.auth.sign_in_with_password({"email": email, "password": password})
        except Exception as e:
            logger.warning(f"Admin sign-in rejected for {email}")
            raise AuthenticationError(_auth_message(e), area=ADMIN_AREA)

        if response is None or response.user is None:
            raise AuthenticationError(INVALID_CREDENTIALS, area=ADMIN_AREA)

        self._user = _user_dict(response.user)
        return self.ensure_admin_profile(self._user)

    def _local_admin_login(self, email: str, password: str) -> Dict[str, Any]:
        admins = self.local_store.get("admin_users", [])
        if not isinstance(admins, list):
            admins = []

        if not admins:
            # First local login becomes the owner
            profile = self._new_admin_profile(
                {"id": uuid.uuid4().hex, "email": email, "user_metadata": {}}, first=True
            )
            profile["password"] = hash_password(password)
            self.local_store.set("admin_users", [profile])
            logger.info(f"Local owner account created for {email}")
        else:
            profile = next((a for a in admins if (a.get("email") or "").lower() == email), None)
            if profile is None or not verify_password(password, profile.get("password")):
                raise AuthenticationError(INVALID_CREDENTIALS, area=ADMIN_AREA)

        self.local_store.set(ADMIN_SESSION_KEY, {"id": profile["id"], "email": email, "at": now_ms()})
        self._admin_profile = {k: v for k, v in profile.items() if k != "password"}
        return self._admin_profile

    def _new_admin_profile(self, user: Dict[str, Any], first: bool) -> Dict[str, Any]:
        email = user.get("email") or ""
        metadata = user.get("user_metadata") or {}
        return {
            "id": user.get("id"),
            "email": email,
            "name": metadata.get("name") or (email.split("@")[0] if email else "Admin"),
            "role": AdminRole.OWNER.value if first else AdminRole.ADMIN.value,
            "permissions": ["*"] if first else [],
            "createdAt": now_ms(),
        }

    def ensure_admin_profile(self, user: Dict[str, Any]) -> Dict[str, Any]:
        """
        Load the admin_users row for ``user``, creating it when missing.

        The first admin ever becomes ``owner`` with every permission;
        later ones start as ``admin`` with none.
        """
        existing = self.gateway.fetch_one("admin_users", "id", user.get("id"))
        if existing.success and existing.data:
            self._admin_profile = existing.data
            return existing.data

        counted = self.gateway.count("admin_users")
        is_first = counted.success and counted.data == 0
        profile = self._new_admin_profile(user, first=is_first)

        inserted = self.gateway.insert("admin_users", profile)
        if not inserted.success:
            logger.error(f"Could not create admin profile for {profile['email']}: {inserted.error}")
        else:
            logger.info(f"Admin profile created for {profile['email']} as {profile['role']}")

        self._admin_profile = profile
        return profile

    def current_role(self) -> Optional[AdminRole]:
        """Role of the signed-in admin (local mode admins act as owner)."""
        if not self.is_admin_authenticated():
            return None
        if self.is_local_mode:
            return AdminRole.OWNER
        if self._admin_profile is None and self._user is not None:
            self.ensure_admin_profile(self._user)
        role = (self._admin_profile or {}).get("role", AdminRole.ADMIN.value)
        try:
            return AdminRole(role)
        except ValueError:
            return AdminRole.ADMIN

    def can(self, permission_id: str) -> bool:
        """Whether the signed-in admin holds ``permission_id``."""
        if not self.is_admin_authenticated():
            return False
        if self.is_local_mode:
            return True
        if self._admin_profile is None and self._user is not None:
            self.ensure_admin_profile(self._user)
        return has_permission(self._admin_profile, permission_id)

    # =========================================================================
    # CLIENT
    # =========================================================================

    def client_login(self, email: str, password: str) -> Dict[str, Any]:
        """
        Sign a storefront customer in.

        Raises:
            AuthenticationError: credentials rejected
        """
        email = (email or "").strip().lower()
        if not email or not password:
            raise AuthenticationError("Email and password are required.", area=CLIENT_AREA)

        if self.is_local_mode:
            profiles = self.local_store.get("client_profiles", [])
            profile = next((p for p in profiles if (p.get("email") or "").lower() == email), None)
            if profile is None or not verify_password(password, profile.get("passwordHash")):
                raise AuthenticationError(INVALID_CREDENTIALS, area=CLIENT_AREA)
            session = {"id": profile["id"], "email": email, "at": now_ms()}
            self.local_store.set(CLIENT_SESSION_KEY, session)
            return session

        try:
            response = self.client.auth.sign_in_with_password({"email": email, "password": password})
        except Exception as e:
            raise AuthenticationError(_auth_message(e), area=CLIENT_AREA)

        if response is None or response.user is None:
            raise AuthenticationError(INVALID_CREDENTIALS, area=CLIENT_AREA)
        self._user = _user_dict(response.user)
        return self._user

    def client_register(
        self,
        email: str,
        password: str,
        full_name: str,
        phone: str = "",
        address: Optional[Dict[str, str]] = None,
    ) -> Dict[str, Any]:
        """
        Create a customer account and its profile row.

        Returns:
            The profile, with ``confirmationRequired`` set when the auth
            provider wants the email confirmed before a session exists

        Raises:
            AuthenticationError: sign-up rejected or email already registered
        """
        email = (email or "").strip().lower()
        if not email or not password:
            raise AuthenticationError("Email and password are required.", area=CLIENT_AREA)

        profile: Dict[str, Any] = {
            "email": email,
            "fullName": full_name,
            "phone": phone,
            "updatedAt": now_ms(),
        }
        profile.update(address or {})

        if self.is_local_mode:
            profiles = self.local_store.get("client_profiles", [])
            if any((p.get("email") or "").lower() == email for p in profiles):
                raise AuthenticationError("An account with this email already exists.", area=CLIENT_AREA)
            profile["id"] = uuid.uuid4().hex
            stored = dict(profile, passwordHash=hash_password(password))
            self.local_store.set("client_profiles", [stored] + list(profiles))
            self.local_store.set(CLIENT_SESSION_KEY, {"id": profile["id"], "email": email, "at": now_ms()})
            profile["confirmationRequired"] = False
            return profile

        try:
            response = self.client.auth.sign_up({
                "email": email,
                "password": password,
                "options": {"data": {"full_name": full_name, "phone": phone, "role": "customer"}},
            })
        except Exception as e:
            raise AuthenticationError(_auth_message(e), area=CLIENT_AREA)

        user = getattr(response, "user", None)
        if user is not None:
            profile["id"] = getattr(user, "id", None)
            result = self.gateway.upsert("profiles", profile)
            if not result.success:
                # Account exists; the profile row can be completed later
                logger.error(f"Profile creation failed: {result.error}")

        session = getattr(response, "session", None)
        if session is not None and user is not None:
            self._user = _user_dict(user)
        profile["confirmationRequired"] = session is None
        return profile

    # =========================================================================
    # LOGOUT
    # =========================================================================

    def logout(self, area: Optional[str] = None) -> None:
        """End the session for ``area`` (both areas when None)."""
        if self.is_local_mode:
            if area in (None, ADMIN_AREA):
                self.local_store.remove(ADMIN_SESSION_KEY)
            if area in (None, CLIENT_AREA):
                self.local_store.remove(CLIENT_SESSION_KEY)
        else:
            try:
                self.client.auth.sign_out()
            except Exception as e:
                logger.warning(f"Sign-out failed: {e}")
            self._user = None

        if area in (None, ADMIN_AREA):
            self._admin_profile = None
        logger.info(f"Logged out ({area or 'all areas'})")
