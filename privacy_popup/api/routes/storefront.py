"""Public popup configuration for the storefront theme extension."""

from fastapi import APIRouter, Query

from privacy_popup.core.deps import Sessions, SettingsRepo
from privacy_popup.core.errors import NotFound
from privacy_popup.integrations.shopify.oauth import normalize_shop_domain
from privacy_popup.schemas.settings import StorefrontPopupConfig
from privacy_popup.widget.popup import render_config

router = APIRouter()


@router.get("/settings", response_model=StorefrontPopupConfig)
async def storefront_settings(
    sessions: Sessions,
    store: SettingsRepo,
    shop: str = Query(..., description="The *.myshopify.com domain"),
) -> StorefrontPopupConfig:
    """Render config for the popup. Only shops with the app installed are served."""
    shop_domain = normalize_shop_domain(shop)
    if shop_domain is None or await sessions.get(shop_domain) is None:
        raise NotFound("Shop not found")

    return render_config(await store.get(shop_domain))
