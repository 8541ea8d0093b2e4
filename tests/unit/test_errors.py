# =============================================================================
# tests/unit/test_errors.py
# Unit Tests for the error hierarchy, handlers and ServiceResult
# =============================================================================

import pytest


class TestExceptions:

    def test_to_dict(self):
        from bridge_core.errors import CheckoutError

        error = CheckoutError("Your cart is empty.", order_id="ORD-123456")

        assert error.to_dict() == {
            "error_type": "CheckoutError",
            "code": "CHECKOUT_001",
            "message": "Your cart is empty.",
            "details": {"order_id": "ORD-123456"},
            "recoverable": True,
        }

    def test_schema_missing_is_a_gateway_error(self):
        from bridge_core.errors import BridgeError, RemoteGatewayError, SchemaMissingError

        error = SchemaMissingError("no table", table="articles")

        assert isinstance(error, RemoteGatewayError)
        assert isinstance(error, BridgeError)

    def test_configuration_errors_not_recoverable(self):
        from bridge_core.errors import ConfigurationError

        assert not ConfigurationError("bad url", config_key="SUPABASE_URL").recoverable

    def test_none_context_is_dropped(self):
        from bridge_core.errors import RemoteGatewayError

        error = RemoteGatewayError("timeout", table="products", remote_code=None)

        assert error.details == {"table": "products"}
        assert error.code == "REMOTE_001"


class TestHandlers:

    def test_handle_error_hides_unexpected_detail(self):
        from bridge_core.errors import handle_error

        message = handle_error(RuntimeError("psycopg: password=hunter2"), log_error=False)

        assert "hunter2" not in message

    def test_handle_error_shows_bridge_message(self):
        from bridge_core.errors import AuthenticationError, handle_error

        assert handle_error(AuthenticationError("Wrong password"), log_error=False) == "Wrong password"

    def test_gateway_errors_get_connection_message(self):
        from bridge_core.errors import CONNECTION_MESSAGE, RemoteGatewayError, user_message_for

        error = RemoteGatewayError("permission denied for table orders", table="orders", remote_code="42501")

        assert user_message_for(error) == CONNECTION_MESSAGE

    def test_schema_missing_message_mentions_local_copy(self):
        from bridge_core.errors import SchemaMissingError, user_message_for

        assert "this device" in user_message_for(SchemaMissingError("relation does not exist"))

    def test_override_message(self):
        from bridge_core.errors import handle_error

        assert handle_error(ValueError("x"), log_error=False, user_message="Try later") == "Try later"

    def test_error_boundary(self):
        from bridge_core.errors import error_boundary

        @error_boundary(default_return=False, log=False)
        def persist():
            raise OSError("disk full")

        assert persist() is False


class TestServiceResult:

    def test_ok_reached_remote(self):
        from bridge_core.services import ServiceResult

        result = ServiceResult.ok([1], metadata={"source": "remote"})

        assert result and result.reached_remote
        assert result.source == "remote"
        assert not result.used_fallback

    def test_fallback_is_success_from_local(self):
        from bridge_core.services import ResultCode, ServiceResult

        result = ServiceResult.fallback(ResultCode.SCHEMA_MISSING, data=[])

        assert result.success
        assert not result.reached_remote
        assert result.source == "local"
        assert result.used_fallback

    def test_from_bridge_exception(self):
        from bridge_core.errors import CheckoutError
        from bridge_core.services import ServiceResult

        result = ServiceResult.from_exception(CheckoutError("Empty"))

        assert not result
        assert result.error_code == "CHECKOUT_001"

    def test_base_service_safe_execute(self):
        from bridge_core.services import BaseService, ResultCode

        class Dummy(BaseService):
            pass

        service = Dummy()

        assert service.safe_execute("add", lambda a, b: a + b, 1, 2).data == 3
        failed = service.safe_execute("divide", lambda: 1 / 0)
        assert not failed.success
        assert failed.error_code == ResultCode.EXCEPTION
