"""Shop info and theme editor deep link for the embedded admin (session required)."""

import logging
from typing import Any

import httpx
from fastapi import APIRouter, Query
from fastapi.responses import RedirectResponse

from privacy_popup.core.auth import CurrentSession
from privacy_popup.core.errors import RequestTimeout, UpstreamError
from privacy_popup.integrations.shopify.client import ShopifyClient
from privacy_popup.integrations.shopify.oauth import build_theme_editor_url

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/shop")
async def get_shop(session: CurrentSession) -> dict[str, Any]:
    """Fetch the current shop's details from the Admin API."""
    client = ShopifyClient(session.shop, session.access_token)
    try:
        return await client.get_shop()
    except httpx.TimeoutException:
        raise RequestTimeout("Shopify did not respond in time") from None
    except httpx.HTTPError as exc:
        logger.warning("Failed to fetch shop data for %s: %s", session.shop, type(exc).__name__)
        raise UpstreamError("Failed to fetch shop data") from None


@router.get("/theme-extension/activate")
async def activate_theme_extension(
    session: CurrentSession,
    template: str = Query("index", pattern=r"^[a-z0-9_.-]+$"),
) -> RedirectResponse:
    """Send the merchant to the theme editor with the popup embed ready to enable."""
    return RedirectResponse(build_theme_editor_url(session.shop, template), status_code=302)
