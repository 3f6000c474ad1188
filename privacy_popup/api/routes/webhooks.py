"""Shopify webhook handlers (no session auth; verified via HMAC)."""

import logging

from fastapi import APIRouter, Request

from privacy_popup.core.config import settings
from privacy_popup.core.deps import Sessions, SettingsRepo
from privacy_popup.core.errors import SignatureInvalid
from privacy_popup.core.logging_config import shop_var
from privacy_popup.integrations.shopify.oauth import normalize_shop_domain
from privacy_popup.integrations.shopify.signatures import verify
from privacy_popup.schemas.common import ErrorResponse
from privacy_popup.services.uninstall_service import handle_app_uninstalled

logger = logging.getLogger(__name__)

router = APIRouter()


async def _verified_body(request: Request) -> bytes:
    """Read the raw body and check X-Shopify-Hmac-Sha256 before anything trusts it."""
    body = await request.body()
    hmac_header = request.headers.get("X-Shopify-Hmac-Sha256", "")

    if not verify(body, hmac_header, settings.shopify_api_secret):
        logger.warning("Rejected webhook with invalid signature")
        raise SignatureInvalid("Invalid webhook signature")

    return body


@router.post("/app/uninstalled", responses={401: {"model": ErrorResponse}})
async def app_uninstalled(
    request: Request,
    sessions: Sessions,
    settings_store: SettingsRepo,
) -> dict[str, str]:
    """Handle the app/uninstalled webhook.

    Once the signature checks out the delivery is always acknowledged with 200;
    Shopify redelivers anything else, and a cleanup failure won't be fixed by
    redelivery.
    """
    await _verified_body(request)

    shop = normalize_shop_domain(request.headers.get("X-Shopify-Shop-Domain"))
    if shop is None:
        logger.warning("Uninstall webhook without a valid shop domain header")
        return {"status": "ignored"}

    shop_var.set(shop)
    logger.info("App uninstalled from shop %s", shop)
    try:
        await handle_app_uninstalled(shop, sessions, settings_store)
    except Exception:
        logger.exception("Cleanup after uninstall failed for %s", shop)

    return {"status": "ok"}
