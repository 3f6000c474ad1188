"""Rate limiting configuration using slowapi."""

from slowapi import Limiter
from starlette.requests import Request

# Install and callback endpoints are hit by merchant browsers, not by Shopify servers
OAUTH_RATE_LIMIT = "30/minute"


def _get_real_client_ip(request: Request) -> str:
    """Extract the client IP behind a reverse proxy."""
    return (
        request.headers.get("X-Forwarded-For", "").split(",")[0].strip()
        or (request.client.host if request.client else "127.0.0.1")
    )


limiter = Limiter(key_func=_get_real_client_ip)
