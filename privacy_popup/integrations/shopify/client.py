"""Shopify Admin API client using httpx."""

import logging
from typing import Any

import httpx

from privacy_popup.core.config import settings

logger = logging.getLogger(__name__)

SHOP_FIELDS = "id,name,domain,email,plan_name,plan_display_name"
UNINSTALL_TOPIC = "app/uninstalled"


class ShopifyClient:
    """Async client for the Shopify Admin REST API."""

    def __init__(self, shop_domain: str, access_token: str) -> None:
        self.shop_domain = shop_domain
        self.base_url = f"https://{shop_domain}/admin/api/{settings.shopify_api_version}"
        self.headers = {
            "X-Shopify-Access-Token": access_token,
            "Content-Type": "application/json",
        }
        self.timeout = settings.shopify_http_timeout_seconds

    async def get_shop(self) -> dict[str, Any]:
        """Fetch basic shop details."""
        async with httpx.AsyncClient(headers=self.headers, timeout=self.timeout) as client:
            response = await client.get(f"{self.base_url}/shop.json", params={"fields": SHOP_FIELDS})
            response.raise_for_status()
            shop: dict[str, Any] = response.json().get("shop", {})
            return shop

    async def register_uninstall_webhook(self) -> bool:
        """Subscribe the app to ``app/uninstalled``. Returns False if Shopify refused."""
        address = f"{settings.app_url}{settings.api_prefix}/webhooks/app/uninstalled"

        async with httpx.AsyncClient(headers=self.headers, timeout=self.timeout) as client:
            response = await client.post(
                f"{self.base_url}/webhooks.json",
                json={
                    "webhook": {
                        "topic": UNINSTALL_TOPIC,
                        "address": address,
                        "format": "json",
                    }
                },
            )
            if not response.is_success:
                logger.warning(
                    "Failed to register webhook %s for %s: %s",
                    UNINSTALL_TOPIC,
                    self.shop_domain,
                    response.status_code,
                )
                return False
            return True
