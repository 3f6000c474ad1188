"""Session gate for embedded-admin API routes.

A request is tied to a shop either by an App Bridge session token
(``Authorization: Bearer``, HS256 signed with the app's API secret) or by the
session cookie set at the end of the OAuth callback (HS256 signed with
SESSION_SECRET). The shop must also have a live session in the session store.
"""

import logging
import time
from typing import Annotated, Any
from urllib.parse import urlparse

import jwt
from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from privacy_popup.core.config import settings
from privacy_popup.core.deps import get_session_store
from privacy_popup.core.errors import Unauthenticated
from privacy_popup.core.logging_config import shop_var
from privacy_popup.integrations.shopify.oauth import normalize_shop_domain
from privacy_popup.schemas.session import ShopSession
from privacy_popup.stores.sessions import SessionStore

logger = logging.getLogger(__name__)

# HTTP Bearer token security scheme
bearer_scheme = HTTPBearer(auto_error=False)

# Clock skew tolerated between Shopify and this server
TOKEN_LEEWAY_SECONDS = 10


def decode_session_token(token: str) -> str:
    """Verify an App Bridge session token and return the shop it was minted for.

    Raises:
        Unauthenticated: If the token is invalid, expired or not for this app.
    """
    try:
        payload: dict[str, Any] = jwt.decode(
            token,
            settings.shopify_api_secret,
            algorithms=["HS256"],
            audience=settings.shopify_api_key,
            leeway=TOKEN_LEEWAY_SECONDS,
            options={"require": ["exp", "dest"]},
        )
    except jwt.ExpiredSignatureError:
        raise Unauthenticated("Session token has expired") from None
    except jwt.InvalidTokenError:
        raise Unauthenticated("Invalid session token") from None

    shop = normalize_shop_domain(urlparse(str(payload["dest"])).netloc)
    if shop is None:
        raise Unauthenticated("Invalid session token")
    return shop


def issue_session_cookie(shop: str) -> str:
    """Sign the cookie value that identifies ``shop`` on later requests."""
    now = int(time.time())
    claims = {"shop": shop, "iat": now, "exp": now + settings.session_cookie_max_age}
    return jwt.encode(claims, settings.session_secret, algorithm="HS256")


def decode_session_cookie(value: str) -> str | None:
    try:
        payload: dict[str, Any] = jwt.decode(
            value,
            settings.session_secret,
            algorithms=["HS256"],
            options={"require": ["exp", "shop"]},
        )
    except jwt.InvalidTokenError:
        return None
    return normalize_shop_domain(str(payload["shop"]))


def resolve_shop(request: Request, credentials: HTTPAuthorizationCredentials | None) -> str:
    """Find the shop the request acts for. Bearer token wins over the cookie."""
    if credentials is not None:
        return decode_session_token(credentials.credentials)

    cookie = request.cookies.get(settings.session_cookie_name)
    if cookie:
        shop = decode_session_cookie(cookie)
        if shop is not None:
            return shop

    raise Unauthenticated()


async def require_session(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    sessions: SessionStore = Depends(get_session_store),
) -> ShopSession:
    """Return the stored session of the requesting shop or fail with 401.

    Error messages never include token material.
    """
    shop = resolve_shop(request, credentials)

    session = await sessions.get(shop)
    if session is None:
        logger.info("No session for %s", shop)
        raise Unauthenticated("Shop is not installed")

    if session.is_expired():
        await sessions.delete(shop)
        raise Unauthenticated("Session has expired")

    shop_var.set(shop)
    return session


# Type alias for dependency injection
CurrentSession = Annotated[ShopSession, Depends(require_session)]
