"""
Unit tests for server exception handlers.

Domain errors map to their status code and error envelope, validation
failures to 422, and anything unexpected to a logged 500 with an error ID.
"""

import json
from unittest.mock import Mock, patch

import pytest
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from httpx import ASGITransport, AsyncClient
from pydantic import BaseModel

from churchsync.core.errors import (
    BusinessRuleError,
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
    RateLimitExceededError,
    SubscriptionInactiveError,
)
from churchsync.server.exception_handlers import setup_exception_handlers
from churchsync.server.exception_handlers.global_handler import (
    churchsync_error_handler,
    global_exception_handler,
)

pytestmark = pytest.mark.asyncio


@pytest.fixture
def mock_request():
    request = Mock(spec=Request)
    request.method = "GET"
    request.url.path = "/api/v1/orgs/grace/volunteers"
    request.query_params = {}
    request.client = Mock()
    request.client.host = "127.0.0.1"
    return request


class TestChurchSyncErrorHandler:
    @pytest.mark.parametrize(
        ("error", "status_code"),
        [
            (BusinessRuleError("Select at least one ministry category"), 400),
            (PermissionDeniedError("Access denied"), 403),
            (NotFoundError("Volunteer not found"), 404),
            (RateLimitExceededError("Too many requests"), 429),
            (SubscriptionInactiveError("Subscription is not active"), 402),
        ],
    )
    async def test_status_and_envelope(self, mock_request, error, status_code):
        response = await churchsync_error_handler(mock_request, error)

        assert response.status_code == status_code
        assert json.loads(response.body) == {"status": "error", "message": error.message}

    async def test_conflict_asks_client_to_refresh(self, mock_request):
        response = await churchsync_error_handler(mock_request, ConflictError("Modified elsewhere", should_refresh=True))

        assert response.status_code == 409
        assert json.loads(response.body)["should_refresh"] is True

    async def test_data_is_included(self, mock_request):
        error = BusinessRuleError("Nothing to export", data={"records": 0})

        response = await churchsync_error_handler(mock_request, error)

        assert json.loads(response.body)["data"] == {"records": 0}

    async def test_expected_errors_are_logged_at_info(self, mock_request):
        with patch("churchsync.server.exception_handlers.global_handler.logger") as mock_logger:
            await churchsync_error_handler(mock_request, NotFoundError("Volunteer not found"))

        mock_logger.info.assert_called_once()
        mock_logger.error.assert_not_called()


class TestGlobalExceptionHandler:
    async def test_logs_error_with_context(self, mock_request):
        with patch("churchsync.server.exception_handlers.global_handler.logger") as mock_logger:
            await global_exception_handler(mock_request, ValueError("Test error"))

        mock_logger.error.assert_called_once()
        call_args = mock_logger.error.call_args
        assert "Unhandled exception" in call_args[0][0]
        assert call_args[1]["extra"]["error_type"] == "ValueError"
        assert call_args[1]["extra"]["path"] == "/api/v1/orgs/grace/volunteers"

    async def test_returns_500_with_error_id(self, mock_request):
        exc = RuntimeError("Test error")

        with patch("churchsync.server.exception_handlers.global_handler.logger"):
            response = await global_exception_handler(mock_request, exc)

        assert isinstance(response, JSONResponse)
        assert response.status_code == 500
        assert json.loads(response.body) == {
            "status": "error",
            "message": "Internal server error",
            "error_id": id(exc),
            "error_type": "RuntimeError",
        }

    async def test_handles_request_without_client(self, mock_request):
        mock_request.client = None

        with patch("churchsync.server.exception_handlers.global_handler.logger") as mock_logger:
            response = await global_exception_handler(mock_request, KeyError("missing"))

        assert response.status_code == 500
        assert mock_logger.error.call_args[1]["extra"]["client"] == "unknown"


class Payload(BaseModel):
    name: str


@pytest.fixture
def app() -> FastAPI:
    app = FastAPI()
    setup_exception_handlers(app)

    @app.get("/missing")
    async def missing():
        raise NotFoundError("Event not found")

    @app.get("/boom")
    async def boom():
        raise RuntimeError("boom")

    @app.post("/items")
    async def create_item(payload: Payload):
        return payload

    return app


class TestSetupExceptionHandlers:
    async def test_domain_error_through_app(self, app):
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://localhost") as client:
            response = await client.get("/missing")

        assert response.status_code == 404
        assert response.json() == {"status": "error", "message": "Event not found"}

    async def test_validation_error_through_app(self, app):
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://localhost") as client:
            response = await client.post("/items", json={})

        assert response.status_code == 422
        body = response.json()
        assert body["message"] == "Invalid request data"
        assert body["errors"][0]["loc"] == ["body", "name"]

    async def test_unhandled_error_through_app(self, app):
        transport = ASGITransport(app=app, raise_app_exceptions=False)
        async with AsyncClient(transport=transport, base_url="http://localhost") as client:
            response = await client.get("/boom")

        assert response.status_code == 500
        assert response.json()["error_type"] == "RuntimeError"
