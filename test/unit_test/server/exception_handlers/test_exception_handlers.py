"""
Unit tests for server exception handlers.

Tests cover the domain error translation and the global handler for
unexpected exceptions.
"""

import json
from unittest.mock import Mock, patch

import pytest
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from httpx import ASGITransport, AsyncClient

from mis_compras.core.errors import (
    AuthenticationError,
    BusinessRuleError,
    ConflictError,
    MisComprasError,
    NotFoundError,
    PermissionDeniedError,
    error_message_for_status,
)
from mis_compras.server.exception_handlers import setup_exception_handlers
from mis_compras.server.exception_handlers.domain_handler import domain_exception_handler
from mis_compras.server.exception_handlers.global_handler import global_exception_handler


@pytest.fixture
def mock_request():
    """Create a mock request object."""
    request = Mock(spec=Request)
    request.method = "GET"
    request.url.path = "/api/v1/test"
    request.query_params = {}
    request.client = Mock()
    request.client.host = "127.0.0.1"
    return request


class TestDomainExceptionHandler:
    """Test suite for the domain error handler."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "exc, status",
        [
            (BusinessRuleError("Insufficient budget"), 400),
            (NotFoundError("Budget", "b-1"), 404),
            (PermissionDeniedError(), 403),
            (ConflictError("Email taken"), 409),
            (AuthenticationError("Invalid token"), 401),
        ],
    )
    async def test_status_and_body(self, mock_request, exc, status):
        response = await domain_exception_handler(mock_request, exc)

        assert response.status_code == status
        body = json.loads(response.body.decode())
        assert body == {"detail": exc.detail, "message": error_message_for_status(status)}

    @pytest.mark.asyncio
    async def test_not_found_detail_names_resource(self, mock_request):
        response = await domain_exception_handler(mock_request, NotFoundError("Budget", "b-1"))
        assert json.loads(response.body.decode())["detail"] == "Budget b-1 not found"

    @pytest.mark.asyncio
    async def test_unauthorized_sets_www_authenticate(self, mock_request):
        response = await domain_exception_handler(mock_request, AuthenticationError("Token expired"))
        assert response.headers["www-authenticate"] == "Bearer"

    @pytest.mark.asyncio
    async def test_forbidden_has_no_www_authenticate(self, mock_request):
        response = await domain_exception_handler(mock_request, PermissionDeniedError())
        assert "www-authenticate" not in response.headers


class TestGlobalExceptionHandler:
    """Test suite for global exception handler."""

    @pytest.mark.asyncio
    async def test_exception_handler_logs_error(self, mock_request):
        exc = ValueError("Test error")

        with patch("mis_compras.server.exception_handlers.global_handler.logger") as mock_logger:
            await global_exception_handler(mock_request, exc)

            mock_logger.error.assert_called_once()
            call_args = mock_logger.error.call_args
            assert "Unhandled exception" in call_args[0][0]
            extra = call_args[1]["extra"]
            assert extra["error_type"] == "ValueError"
            assert extra["method"] == "GET"
            assert extra["path"] == "/api/v1/test"
            assert extra["client"] == "127.0.0.1"

    @pytest.mark.asyncio
    async def test_exception_handler_response(self, mock_request):
        exc = RuntimeError("Test error")

        with patch("mis_compras.server.exception_handlers.global_handler.logger"):
            response = await global_exception_handler(mock_request, exc)

        assert isinstance(response, JSONResponse)
        assert response.status_code == 500
        body = json.loads(response.body.decode())
        assert body["detail"] == "Internal server error"
        assert body["message"] == error_message_for_status(500)
        assert body["error_type"] == "RuntimeError"
        assert body["error_id"] == id(exc)

    @pytest.mark.asyncio
    async def test_missing_client(self, mock_request):
        mock_request.client = None

        with patch("mis_compras.server.exception_handlers.global_handler.logger") as mock_logger:
            await global_exception_handler(mock_request, KeyError("x"))

        assert mock_logger.error.call_args[1]["extra"]["client"] == "unknown"


class TestSetupExceptionHandlers:
    """Handlers registered on an application."""

    def test_registers_both_handlers(self):
        app = FastAPI()
        setup_exception_handlers(app)

        assert app.exception_handlers[MisComprasError] is domain_exception_handler
        assert app.exception_handlers[Exception] is global_exception_handler

    @pytest.mark.asyncio
    async def test_domain_error_raised_in_route(self):
        app = FastAPI()
        setup_exception_handlers(app)

        @app.get("/boom")
        async def boom():
            raise BusinessRuleError("Budget is blocked")

        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://localhost") as client:
            response = await client.get("/boom")

        assert response.status_code == 400
        assert response.json()["detail"] == "Budget is blocked"
