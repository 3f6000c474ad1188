"""Tests for the error taxonomy and its JSON rendering."""

import json

import pytest
from fastapi import Request
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from privacy_popup.core.errors import (
    AppError,
    NotFound,
    OAuthCallbackError,
    RequestTimeout,
    SignatureInvalid,
    Unauthenticated,
    UpstreamError,
    ValidationError,
    app_error_handler,
    http_exception_handler,
    request_validation_handler,
)


class TestAppErrors:
    """Status codes and bodies of each error kind."""

    @pytest.mark.parametrize(
        ("error_class", "status_code", "code"),
        [
            (ValidationError, 400, "validation_error"),
            (Unauthenticated, 401, "unauthenticated"),
            (SignatureInvalid, 401, "invalid_signature"),
            (OAuthCallbackError, 400, "oauth_failed"),
            (UpstreamError, 502, "upstream_error"),
            (RequestTimeout, 504, "timeout"),
            (NotFound, 404, "not_found"),
        ],
    )
    def test_mapping(self, error_class: type[AppError], status_code: int, code: str) -> None:
        error = error_class()

        assert error.status_code == status_code
        assert error.to_dict() == {"error": code, "detail": error.message}

    def test_custom_message(self) -> None:
        assert str(NotFound("Shop not found")) == "Shop not found"

    def test_status_override(self) -> None:
        assert UpstreamError(status_code=500).status_code == 500
        assert UpstreamError().status_code == 502

    def test_details_rendered_as_errors(self) -> None:
        error = ValidationError(details=[{"loc": ["position"], "msg": "bad", "type": "enum"}])

        assert error.to_dict()["errors"] == [{"loc": ["position"], "msg": "bad", "type": "enum"}]

    def test_unauthenticated_retry_header(self) -> None:
        assert Unauthenticated().headers == {"X-Shopify-Retry-Invalid-Session-Request": "1"}


class TestExceptionHandlers:
    """Each handler renders its own exception class as JSON."""

    @pytest.fixture
    def request_(self) -> Request:
        return Request({"type": "http", "method": "GET", "path": "/", "headers": []})

    async def test_app_error(self, request_: Request) -> None:
        response = await app_error_handler(request_, Unauthenticated())

        assert response.status_code == 401
        assert json.loads(response.body) == {
            "error": "unauthenticated",
            "detail": Unauthenticated.message,
        }
        assert response.headers["X-Shopify-Retry-Invalid-Session-Request"] == "1"

    async def test_http_exception(self, request_: Request) -> None:
        response = await http_exception_handler(
            request_, StarletteHTTPException(status_code=405, detail="Method Not Allowed")
        )

        assert response.status_code == 405
        assert json.loads(response.body)["error"] == "method_not_allowed"

    async def test_request_validation(self, request_: Request) -> None:
        missing_shop = {
            "loc": ("query", "shop"),
            "msg": "Field required",
            "type": "missing",
            "input": None,
        }
        exc = RequestValidationError([missing_shop])

        response = await request_validation_handler(request_, exc)

        assert response.status_code == 400
        body = json.loads(response.body)
        assert body["error"] == "validation_error"
        assert body["errors"] == [
            {"loc": ["query", "shop"], "msg": "Field required", "type": "missing"}
        ]
