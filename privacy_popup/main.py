"""Privacy Popup API: app factory and ASGI entry point."""

import asyncio
import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, RedirectResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from privacy_popup.api.router import api_router
from privacy_popup.core.config import settings
from privacy_popup.core.deps import close_backend
from privacy_popup.core.errors import RequestTimeout, register_exception_handlers
from privacy_popup.core.logging_config import (
    generate_request_id,
    request_id_var,
    setup_logging,
    shop_var,
)
from privacy_popup.core.rate_limit import limiter

logger = logging.getLogger(__name__)

# Storefront extension requests come from any shop's own domain
SHOP_ORIGIN_REGEX = r"https://[a-z0-9][a-z0-9-]*\.myshopify\.com"


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    setup_logging(debug=settings.debug)
    logger.info(
        "%s %s starting (%s) at %s",
        settings.project_name,
        settings.version,
        settings.environment,
        settings.app_url,
    )
    try:
        yield
    finally:
        await close_backend()
        logger.info("Storage backend closed")


def _init_sentry() -> None:
    import sentry_sdk

    sentry_sdk.init(
        dsn=settings.sentry_dsn,
        environment=settings.environment,
        release=f"privacy-popup@{settings.version}",
        traces_sample_rate=0.1,
        send_default_pii=False,
    )


def _add_middleware(app: FastAPI) -> None:
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)  # type: ignore[arg-type]
    app.add_middleware(SlowAPIMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_origin_regex=SHOP_ORIGIN_REGEX,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type"],
    )

    @app.middleware("http")
    async def enforce_request_timeout(request: Request, call_next: Any) -> Response:
        try:
            return await asyncio.wait_for(  # type: ignore[no-any-return]
                call_next(request), timeout=settings.request_timeout_seconds
            )
        except TimeoutError:
            logger.error(
                "Request exceeded %ss: %s %s",
                settings.request_timeout_seconds,
                request.method,
                request.url.path,
            )
            error = RequestTimeout()
            return JSONResponse(status_code=error.status_code, content=error.to_dict())

    # Registered last so it wraps everything above and every log line carries the id
    @app.middleware("http")
    async def bind_request_context(request: Request, call_next: Any) -> Response:
        request_id = request.headers.get("X-Request-ID") or generate_request_id()
        request_id_var.set(request_id)
        shop_var.set("")
        response: Response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response


def create_app() -> FastAPI:
    if settings.sentry_dsn:
        _init_sentry()

    app = FastAPI(
        title=settings.project_name,
        version=settings.version,
        description="Backend for the storefront privacy popup Shopify app",
        openapi_url=f"{settings.api_prefix}/openapi.json",
        docs_url=f"{settings.api_prefix}/docs",
        redoc_url=None,
        lifespan=lifespan,
    )

    _add_middleware(app)
    app.include_router(api_router, prefix=settings.api_prefix)
    register_exception_handlers(app)

    @app.get("/docs", include_in_schema=False)
    async def docs_redirect() -> RedirectResponse:
        return RedirectResponse(url=app.docs_url or "/")

    @app.get("/", include_in_schema=False)
    async def index() -> dict[str, Any]:
        """Service banner for humans and uptime checks."""
        return {
            "name": settings.project_name,
            "version": settings.version,
            "docs": app.docs_url,
            "health": f"{settings.api_prefix}/health",
        }

    return app


app = create_app()
