"""Shopify OAuth helpers for shop validation, redirects and token exchange."""

import base64
import re
from dataclasses import dataclass
from urllib.parse import urlencode

import httpx

from privacy_popup.core.config import settings

_SHOP_DOMAIN_RE = re.compile(r"^[a-z0-9][a-z0-9-]*\.myshopify\.com$")


@dataclass(frozen=True)
class TokenGrant:
    access_token: str
    scope: str


def normalize_shop_domain(shop: str | None) -> str | None:
    """Lower-case and validate a shop domain. Returns None if it isn't a myshopify domain."""
    if not shop:
        return None
    normalized = shop.strip().lower()
    if not _SHOP_DOMAIN_RE.fullmatch(normalized):
        return None
    return normalized


def encode_host(shop: str) -> str:
    """Build the base64 ``host`` parameter App Bridge expects for ``shop``."""
    return base64.b64encode(f"{shop}/admin".encode()).decode()


def build_auth_url(shop: str, nonce: str) -> str:
    """Build the Shopify OAuth authorization URL.

    Args:
        shop: The shop domain (e.g. mystore.myshopify.com).
        nonce: Random state parameter for CSRF protection.

    Returns:
        The full authorization URL to redirect the merchant to.
    """
    redirect_uri = f"{settings.app_url}{settings.api_prefix}/auth/callback"
    params = urlencode({
        "client_id": settings.shopify_api_key,
        "scope": settings.scopes,
        "redirect_uri": redirect_uri,
        "state": nonce,
    })
    return f"https://{shop}/admin/oauth/authorize?{params}"


def build_embedded_app_url(shop: str) -> str:
    """URL of the embedded admin root the merchant lands on after install."""
    params = urlencode({"shop": shop, "host": encode_host(shop)})
    return f"{settings.app_url}/?{params}"


def build_theme_editor_url(shop: str, template: str = "index") -> str:
    """Deep link that opens the theme editor with the popup app embed selected."""
    params = urlencode({
        "context": "apps",
        "template": template,
        "activateAppId": f"{settings.shopify_api_key}/privacy-popup",
    })
    return f"https://{shop}/admin/themes/current/editor?{params}"


async def exchange_code_for_token(shop: str, code: str) -> TokenGrant:
    """Exchange the OAuth authorization code for an access token.

    Args:
        shop: The shop domain.
        code: The single-use authorization code from Shopify.

    Returns:
        The granted access token and scopes.

    Raises:
        httpx.HTTPStatusError: If Shopify rejects the code.
        httpx.TimeoutException: If Shopify doesn't answer in time.
        httpx.RequestError: On any other transport failure.
        ValueError: If the response body is not a JSON object.
    """
    url = f"https://{shop}/admin/oauth/access_token"
    async with httpx.AsyncClient(timeout=settings.shopify_http_timeout_seconds) as client:
        response = await client.post(url, json={
            "client_id": settings.shopify_api_key,
            "client_secret": settings.shopify_api_secret,
            "code": code,
        })
        response.raise_for_status()
        data = response.json()
        if not isinstance(data, dict):
            raise ValueError(f"Expected a JSON object, got {type(data).__name__}")
        return TokenGrant(access_token=data["access_token"], scope=data.get("scope", ""))
