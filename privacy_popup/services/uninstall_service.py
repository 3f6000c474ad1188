"""Cleanup when a shop uninstalls the app."""

import logging

from privacy_popup.stores.sessions import SessionStore
from privacy_popup.stores.settings import SettingsStore

logger = logging.getLogger(__name__)


async def handle_app_uninstalled(
    shop: str,
    sessions: SessionStore,
    settings_store: SettingsStore,
) -> None:
    """Drop the shop's session and popup settings.

    The access token is already revoked by Shopify at this point, so nothing
    stored for the shop is usable anymore.
    """
    await sessions.delete(shop)
    await settings_store.delete(shop)
    logger.info("Removed session and settings for uninstalled shop %s", shop)
