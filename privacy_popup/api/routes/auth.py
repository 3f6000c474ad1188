"""Shopify OAuth install and callback endpoints."""

import logging

from fastapi import APIRouter, Query, Request
from fastapi.responses import RedirectResponse

from privacy_popup.core.auth import issue_session_cookie
from privacy_popup.core.config import settings
from privacy_popup.core.deps import OAuthStates, Sessions
from privacy_popup.core.errors import OAuthCallbackError, ValidationError
from privacy_popup.core.rate_limit import OAUTH_RATE_LIMIT, limiter
from privacy_popup.integrations.shopify.oauth import build_auth_url, normalize_shop_domain
from privacy_popup.services.oauth_service import CallbackState, OAuthCallbackHandler

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("")
@limiter.limit(OAUTH_RATE_LIMIT)
async def begin_install(
    request: Request,  # noqa: ARG001 (required by slowapi)
    oauth_states: OAuthStates,
    shop: str = Query(..., description="The *.myshopify.com domain"),
) -> RedirectResponse:
    """Start the OAuth flow by redirecting the merchant to Shopify's consent screen."""
    shop_domain = normalize_shop_domain(shop)
    if shop_domain is None:
        raise ValidationError("shop must be a valid *.myshopify.com domain")

    nonce = await oauth_states.issue(shop_domain)
    return RedirectResponse(build_auth_url(shop_domain, nonce), status_code=302)


@router.get("/callback")
@limiter.limit(OAUTH_RATE_LIMIT)
async def callback(
    request: Request,
    sessions: Sessions,
    oauth_states: OAuthStates,
) -> RedirectResponse:
    """Handle Shopify OAuth callback.

    Parameters are read from the raw query string because every one of them,
    including ones this app doesn't use, is covered by the HMAC.
    """
    handler = OAuthCallbackHandler(sessions, oauth_states, secret=settings.shopify_api_secret)
    result = await handler.handle(dict(request.query_params))

    if result.error is not None:
        raise result.error
    if (
        result.state is not CallbackState.AUTHENTICATED
        or result.shop is None
        or result.redirect_url is None
    ):
        raise OAuthCallbackError()

    response = RedirectResponse(result.redirect_url, status_code=302)
    response.set_cookie(
        settings.session_cookie_name,
        issue_session_cookie(result.shop),
        max_age=settings.session_cookie_max_age,
        httponly=True,
        secure=True,
        samesite="none",
    )
    return response
