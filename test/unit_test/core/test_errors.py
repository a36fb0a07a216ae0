"""Unit tests for the domain error hierarchy."""

from mis_compras.core.errors import (
    DEFAULT_ERROR_MESSAGE,
    AuthenticationError,
    BusinessRuleError,
    ConflictError,
    MisComprasError,
    NotFoundError,
    PermissionDeniedError,
    error_message_for_status,
)


class TestErrors:
    """Test status codes and messages of the domain errors."""

    def test_status_codes(self):
        assert BusinessRuleError("x").status_code == 400
        assert AuthenticationError("x").status_code == 401
        assert PermissionDeniedError().status_code == 403
        assert NotFoundError("Budget").status_code == 404
        assert ConflictError("x").status_code == 409

    def test_all_errors_share_the_base(self):
        for exc in (BusinessRuleError("x"), NotFoundError("x"), PermissionDeniedError(), ConflictError("x")):
            assert isinstance(exc, MisComprasError)

    def test_not_found_detail(self):
        assert NotFoundError("Budget").detail == "Budget not found"
        exc = NotFoundError("Budget", "abc")
        assert exc.detail == "Budget abc not found"
        assert exc.resource == "Budget"
        assert exc.resource_id == "abc"

    def test_permission_default_detail(self):
        assert PermissionDeniedError().detail == "Insufficient permissions"

    def test_messages_for_status(self):
        assert error_message_for_status(403) == "No tienes permisos para realizar esta acción."
        assert error_message_for_status(401).startswith("Sesión expirada")
        assert error_message_for_status(418) == DEFAULT_ERROR_MESSAGE
        assert error_message_for_status(None) == DEFAULT_ERROR_MESSAGE
