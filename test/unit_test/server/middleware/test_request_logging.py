"""Unit tests for the request logging middleware."""

from unittest.mock import patch

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from mis_compras.server.middleware import RequestLoggingMiddleware
from mis_compras.server.middleware import request_logging

pytestmark = pytest.mark.asyncio


def _app() -> FastAPI:
    app = FastAPI()
    app.add_middleware(RequestLoggingMiddleware)

    @app.get("/ping")
    async def ping():
        return {"pong": True}

    @app.get("/fail")
    async def fail():
        raise RuntimeError("boom")

    return app


async def test_sets_process_time_header():
    async with AsyncClient(transport=ASGITransport(app=_app()), base_url="http://localhost") as client:
        response = await client.get("/ping")

    assert response.status_code == 200
    assert float(response.headers["X-Process-Time"]) >= 0


async def test_slow_request_is_logged_as_warning(monkeypatch):
    monkeypatch.setattr(request_logging, "SLOW_REQUEST_MS", -1)

    with patch.object(request_logging, "logger") as mock_logger:
        async with AsyncClient(transport=ASGITransport(app=_app()), base_url="http://localhost") as client:
            await client.get("/ping")

    mock_logger.warning.assert_called_once()
    extra = mock_logger.warning.call_args[1]["extra"]
    assert extra["path"] == "/ping"
    assert extra["status_code"] == 200


async def test_failed_request_is_logged_and_reraised():
    with patch.object(request_logging, "logger") as mock_logger:
        async with AsyncClient(transport=ASGITransport(app=_app()), base_url="http://localhost") as client:
            with pytest.raises(RuntimeError, match="boom"):
                await client.get("/fail")

    mock_logger.error.assert_called_once()
    assert mock_logger.error.call_args[1]["extra"]["error"] == "boom"
