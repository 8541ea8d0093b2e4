# =============================================================================
# tests/unit/test_session_gate.py
# Unit Tests for SessionGate
# =============================================================================

import pytest
from unittest.mock import MagicMock


@pytest.fixture
def local_gate(offline_gateway, local_store):
    from bridge_core.auth import SessionGate

    return SessionGate(offline_gateway, local_store)


@pytest.fixture
def remote_gate(online_gateway, local_store):
    from bridge_core.auth import SessionGate

    return SessionGate(online_gateway, local_store)


def _auth_response(user_id="u1", email="owner@example.com", session=True):
    response = MagicMock()
    response.user.id = user_id
    response.user.email = email
    response.user.user_metadata = {"name": "Owner"}
    response.session = MagicMock() if session else None
    return response


class TestPasswords:
    """bcrypt helpers"""

    def test_hash_and_verify(self):
        from bridge_core.auth import hash_password, verify_password

        hashed = hash_password("s3cret!")

        assert hashed.startswith("$2")
        assert verify_password("s3cret!", hashed)
        assert not verify_password("wrong", hashed)

    def test_verify_rejects_non_hash(self):
        from bridge_core.auth import verify_password

        assert not verify_password("plain", "plain")
        assert not verify_password("plain", None)


class TestLocalAdmin:
    """Admin login without a backend"""

    def test_not_authenticated_initially(self, local_gate):
        assert not local_gate.is_admin_authenticated()
        assert local_gate.current_role() is None

    def test_first_login_creates_owner(self, local_gate, local_store):
        from bridge_core.models import AdminRole

        profile = local_gate.admin_login("Owner@Example.com", "s3cret!")

        assert profile["role"] == "owner"
        assert profile["permissions"] == ["*"]
        assert "password" not in profile
        assert local_gate.is_admin_authenticated()
        assert local_gate.current_role() == AdminRole.OWNER
        stored = local_store.get("admin_users")[0]
        assert stored["email"] == "owner@example.com"
        assert stored["password"] != "s3cret!"

    def test_login_checks_bcrypt_password(self, local_gate):
        from bridge_core.auth import ADMIN_AREA
        from bridge_core.errors import AuthenticationError

        local_gate.admin_login("owner@example.com", "s3cret!")
        local_gate.logout()

        with pytest.raises(AuthenticationError) as exc_info:
            local_gate.admin_login("owner@example.com", "wrong")

        assert exc_info.value.details["area"] == ADMIN_AREA
        assert "Incorrect email or password" in exc_info.value.message
        assert not local_gate.is_admin_authenticated()

    def test_empty_credentials_rejected(self, local_gate):
        from bridge_core.errors import AuthenticationError

        with pytest.raises(AuthenticationError):
            local_gate.admin_login("", "")

    def test_logout_admin_keeps_client_session(self, local_gate):
        local_gate.admin_login("owner@example.com", "s3cret!")
        local_gate.client_register("c@example.com", "pw123456", "Client")

        local_gate.logout("admin")

        assert not local_gate.is_admin_authenticated()
        assert local_gate.is_client_authenticated()

    def test_local_admin_can_do_anything(self, local_gate):
        local_gate.admin_login("owner@example.com", "s3cret!")

        assert local_gate.can("system.team.delete")


class TestLocalClient:
    """Client accounts stored locally"""

    def test_register_then_login(self, local_gate):
        profile = local_gate.client_register("Lerato@Example.com", "pw123456", "Lerato", phone="082")

        assert profile["confirmationRequired"] is False
        assert "passwordHash" not in profile
        local_gate.logout("client")

        session = local_gate.client_login("lerato@example.com", "pw123456")

        assert session["email"] == "lerato@example.com"
        assert local_gate.is_client_authenticated()

    def test_duplicate_email_rejected(self, local_gate):
        from bridge_core.errors import AuthenticationError

        local_gate.client_register("a@example.com", "pw123456", "A")

        with pytest.raises(AuthenticationError):
            local_gate.client_register("A@example.com", "other", "A2")

    def test_wrong_password_rejected(self, local_gate):
        from bridge_core.errors import AuthenticationError

        local_gate.client_register("a@example.com", "pw123456", "A")

        with pytest.raises(AuthenticationError):
            local_gate.client_login("a@example.com", "nope")


class TestRemoteAdmin:
    """Admin login through Supabase Auth (mocked)"""

    def test_first_remote_admin_becomes_owner(self, remote_gate, mock_supabase_client):
        mock_supabase_client.auth.sign_in_with_password.return_value = _auth_response()

        profile = remote_gate.admin_login("owner@example.com", "s3cret!")

        assert profile["role"] == "owner"
        assert profile["permissions"] == ["*"]
        mock_supabase_client.table.return_value.insert.assert_called_once()
        assert remote_gate.is_admin_authenticated()

    def test_later_admin_gets_no_permissions(self, remote_gate, mock_supabase_client):
        mock_supabase_client.auth.sign_in_with_password.return_value = _auth_response("u2", "staff@example.com")
        mock_supabase_client.table.return_value.select.return_value.limit.return_value.execute.return_value.count = 1

        profile = remote_gate.admin_login("staff@example.com", "pw")

        assert profile["role"] == "admin"
        assert profile["permissions"] == []
        assert not remote_gate.can("catalog.products.delete")

    def test_existing_profile_is_reused(self, remote_gate, mock_supabase_client):
        mock_supabase_client.auth.sign_in_with_password.return_value = _auth_response("u3")
        query = mock_supabase_client.table.return_value.select.return_value.eq.return_value.limit.return_value
        query.execute.return_value.data = [{"id": "u3", "role": "admin", "permissions": ["catalog"]}]

        profile = remote_gate.admin_login("u3@example.com", "pw")

        assert profile["permissions"] == ["catalog"]
        mock_supabase_client.table.return_value.insert.assert_not_called()
        assert remote_gate.can("catalog.products.delete")
        assert not remote_gate.can("system.team.manage")

    def test_invalid_credentials_message(self, remote_gate, mock_supabase_client):
        from bridge_core.errors import AuthenticationError

        mock_supabase_client.auth.sign_in_with_password.side_effect = Exception("Invalid login credentials")

        with pytest.raises(AuthenticationError) as exc_info:
            remote_gate.admin_login("owner@example.com", "bad")

        assert exc_info.value.message == "Incorrect email or password. Please verify your credentials."
        assert mock_supabase_client.auth.sign_in_with_password.call_count == 1

    def test_session_restored_from_auth_provider(self, remote_gate, mock_supabase_client):
        session = MagicMock()
        session.user.id = "u9"
        session.user.email = "u9@example.com"
        session.user.user_metadata = {}
        mock_supabase_client.auth.get_session.return_value = session

        assert remote_gate.is_client_authenticated()
        assert remote_gate.current_user["id"] == "u9"

    def test_logout_signs_out(self, remote_gate, mock_supabase_client):
        mock_supabase_client.auth.sign_in_with_password.return_value = _auth_response()
        remote_gate.admin_login("owner@example.com", "s3cret!")

        remote_gate.logout()

        mock_supabase_client.auth.sign_out.assert_called_once()
        assert remote_gate.admin_profile is None
        assert not remote_gate.is_admin_authenticated()


class TestRemoteClient:
    """Client registration through Supabase Auth (mocked)"""

    def test_register_upserts_profile(self, remote_gate, mock_supabase_client):
        mock_supabase_client.auth.sign_up.return_value = _auth_response("c1", "c@example.com")

        profile = remote_gate.client_register("c@example.com", "pw123456", "Client", address={"city": "Durban"})

        assert profile["id"] == "c1"
        assert profile["city"] == "Durban"
        assert profile["confirmationRequired"] is False
        sent = mock_supabase_client.auth.sign_up.call_args.args[0]
        assert sent["options"]["data"]["full_name"] == "Client"
        mock_supabase_client.table.assert_called_with("profiles")

    def test_register_without_session_needs_confirmation(self, remote_gate, mock_supabase_client):
        mock_supabase_client.auth.sign_up.return_value = _auth_response("c2", "c2@example.com", session=False)

        profile = remote_gate.client_register("c2@example.com", "pw123456", "Client")

        assert profile["confirmationRequired"] is True
