"""
Unit tests for server exception handlers.

Tests cover the global handler and the handlers of restbone and validation
errors raised by the generated routes.
"""

import json
from unittest.mock import Mock, patch

import pytest
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ValidationError

from restbone.core.errors import (
    AuthorizationError,
    InvalidQueryError,
    RegistryError,
    ResourceNotFoundError,
)
from restbone.server.exception_handlers import setup_exception_handlers, setup_resource_handlers
from restbone.server.exception_handlers.global_handler import global_exception_handler
from restbone.server.exception_handlers.resource_handler import (
    not_found_handler,
    restbone_error_handler,
    validation_error_handler,
)


class Payload(BaseModel):
    name: str
    age: int


def make_request(headers=None, templates=None, session=None) -> Request:
    app = FastAPI()
    app.state.restbone_templates = templates
    scope = {
        "type": "http",
        "method": "GET",
        "path": "/posts/missing",
        "query_string": b"",
        "headers": [(key.lower().encode(), value.encode()) for key, value in (headers or {}).items()],
        "path_params": {},
        "app": app,
    }
    if session is not None:
        scope["session"] = session
    return Request(scope)


def body_of(response) -> dict:
    return json.loads(response.body.decode())


class TestGlobalExceptionHandler:
    """Test suite for global exception handler."""

    @pytest.fixture
    def mock_request(self):
        request = Mock(spec=Request)
        request.method = "GET"
        request.url.path = "/posts"
        request.query_params = {}
        request.client = Mock()
        request.client.host = "127.0.0.1"
        return request

    @pytest.mark.asyncio
    async def test_logs_error_with_context(self, mock_request):
        exc = ValueError("Test error")

        with patch("restbone.server.exception_handlers.global_handler.logger") as mock_logger:
            await global_exception_handler(mock_request, exc)

        mock_logger.error.assert_called_once()
        call_args = mock_logger.error.call_args
        assert "Unhandled exception" in call_args[0][0]
        assert call_args[1]["extra"]["error_type"] == "ValueError"
        assert call_args[1]["extra"]["client"] == "127.0.0.1"

    @pytest.mark.asyncio
    async def test_returns_500_with_error_id(self, mock_request):
        exc = RuntimeError("Test error")

        with patch("restbone.server.exception_handlers.global_handler.logger"):
            response = await global_exception_handler(mock_request, exc)

        assert isinstance(response, JSONResponse)
        assert response.status_code == 500
        assert body_of(response) == {
            "detail": "Internal server error",
            "error_id": id(exc),
            "error_type": "RuntimeError",
        }

    @pytest.mark.asyncio
    async def test_unknown_client(self, mock_request):
        mock_request.client = None

        with patch("restbone.server.exception_handlers.global_handler.logger") as mock_logger:
            await global_exception_handler(mock_request, KeyError("x"))

        assert mock_logger.error.call_args[1]["extra"]["client"] == "unknown"


class TestRestboneErrorHandler:
    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "exc,status_code,detail",
        [
            (ResourceNotFoundError("post", "7"), 404, "The post could not be found."),
            (AuthorizationError("create", "post"), 403, "auth"),
            (InvalidQueryError("Cannot order Post by 'x'"), 400, "Cannot order Post by 'x'"),
            (RegistryError("broken"), 500, "broken"),
        ],
    )
    async def test_status_and_detail(self, exc, status_code, detail):
        response = await restbone_error_handler(make_request(), exc)

        assert response.status_code == status_code
        assert body_of(response) == {"detail": detail}

    @pytest.mark.asyncio
    async def test_server_errors_are_logged_as_errors(self):
        with patch("restbone.server.exception_handlers.resource_handler.logger") as mock_logger:
            await restbone_error_handler(make_request(), RegistryError("broken"))

        mock_logger.error.assert_called_once()
        mock_logger.warning.assert_not_called()


class TestNotFoundHandler:
    @pytest.mark.asyncio
    async def test_json_request(self):
        response = await not_found_handler(make_request(), ResourceNotFoundError("post"))

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_html_request_with_referer_redirects_back(self):
        session = {}
        request = make_request(headers={"referer": "/posts"}, templates=object(), session=session)

        response = await not_found_handler(request, ResourceNotFoundError("post"))

        assert response.status_code == 303
        assert response.headers["location"] == "/posts"
        assert session["_flashes"] == [["error", "The post could not be found."]]

    @pytest.mark.asyncio
    async def test_html_request_without_referer(self):
        request = make_request(templates=object())

        response = await not_found_handler(request, ResourceNotFoundError("post"))

        assert response.status_code == 404


class TestValidationErrorHandler:
    @pytest.mark.asyncio
    async def test_lists_errors(self):
        with pytest.raises(ValidationError) as exc_info:
            Payload.model_validate({"age": "old"})

        response = await validation_error_handler(make_request(), exc_info.value)

        assert response.status_code == 422
        errors = body_of(response)["detail"]
        assert {tuple(error["loc"]) for error in errors} == {("name",), ("age",)}
        assert all(set(error) == {"loc", "msg", "type"} for error in errors)


class TestSetupExceptionHandlers:
    def test_setup_exception_handlers(self):
        app = FastAPI()

        setup_exception_handlers(app)

        assert app.exception_handlers[Exception] is global_exception_handler

    def test_setup_resource_handlers(self):
        app = FastAPI()

        setup_resource_handlers(app)

        assert app.exception_handlers[ResourceNotFoundError] is not_found_handler
        assert app.exception_handlers[ValidationError] is validation_error_handler
