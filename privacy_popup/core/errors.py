"""Application error taxonomy and the JSON handlers that render it.

Every error leaves the service as ``{"error": <code>, "detail": <message>}``.
Handlers are registered on the app in ``main.create_app``.
"""

import logging
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class AppError(Exception):
    """Base class for errors that map onto an HTTP response."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    error: str = "internal_error"
    message: str = "Internal server error"

    def __init__(
        self,
        message: str | None = None,
        *,
        status_code: int | None = None,
        headers: dict[str, str] | None = None,
        details: Any = None,
    ) -> None:
        self.message = message or self.message
        if status_code is not None:
            self.status_code = status_code
        self.headers = headers
        self.details = details
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {"error": self.error, "detail": self.message}
        if self.details is not None:
            body["errors"] = self.details
        return body


class ValidationError(AppError):
    """A request payload failed validation."""

    status_code = status.HTTP_400_BAD_REQUEST
    error = "validation_error"
    message = "Invalid request payload"


class Unauthenticated(AppError):
    """No valid session for the request."""

    status_code = status.HTTP_401_UNAUTHORIZED
    error = "unauthenticated"
    message = "Not authenticated"

    def __init__(self, message: str | None = None) -> None:
        # App Bridge fetches a fresh session token and retries when it sees this header
        super().__init__(
            message,
            headers={"X-Shopify-Retry-Invalid-Session-Request": "1"},
        )


class SignatureInvalid(AppError):
    """HMAC signature did not match."""

    status_code = status.HTTP_401_UNAUTHORIZED
    error = "invalid_signature"
    message = "Invalid HMAC signature"


class OAuthCallbackError(AppError):
    """The OAuth callback could not be completed."""

    status_code = status.HTTP_400_BAD_REQUEST
    error = "oauth_failed"
    message = "OAuth callback failed"


class UpstreamError(AppError):
    """A call to Shopify failed."""

    status_code = status.HTTP_502_BAD_GATEWAY
    error = "upstream_error"
    message = "Upstream request failed"


class RequestTimeout(AppError):
    """A request or outbound call exceeded its time budget."""

    status_code = status.HTTP_504_GATEWAY_TIMEOUT
    error = "timeout"
    message = "Request timeout"


class NotFound(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    error = "not_found"
    message = "Not found"


async def app_error_handler(_request: Request, exc: AppError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s: %s", exc.error, exc.message)
    else:
        logger.info("%s: %s", exc.error, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=exc.headers)


async def http_exception_handler(_request: Request, exc: StarletteHTTPException) -> JSONResponse:
    detail = exc.detail if isinstance(exc.detail, str) else "Request failed"
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": detail.lower().replace(" ", "_"), "detail": detail},
        headers=getattr(exc, "headers", None),
    )


async def request_validation_handler(
    _request: Request, exc: RequestValidationError
) -> JSONResponse:
    error = ValidationError(details=plain_errors(exc.errors()))
    return JSONResponse(status_code=error.status_code, content=error.to_dict())


async def unhandled_exception_handler(_request: Request, exc: Exception) -> JSONResponse:
    """Handle unhandled exceptions with a JSON 500 instead of crashing the worker."""
    logger.exception("Unhandled exception: %s", exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "internal_error", "detail": "Internal server error"},
    )


def plain_errors(errors: Any) -> list[dict[str, Any]]:
    """Strip non-serializable context from pydantic error entries."""
    return [
        {"loc": list(e.get("loc", ())), "msg": e.get("msg", ""), "type": e.get("type", "")}
        for e in errors
    ]


def register_exception_handlers(app: FastAPI) -> None:
    # Starlette types handlers as taking Exception; each one only sees its own class
    app.add_exception_handler(AppError, app_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, request_validation_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, unhandled_exception_handler)
