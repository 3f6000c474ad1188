"""API router combining all route modules."""

from fastapi import APIRouter, Depends

from privacy_popup.api.routes import auth, health, settings, shop, storefront, webhooks
from privacy_popup.core.auth import require_session

api_router = APIRouter()

# Health checks and config probe (no prefix, no auth)
api_router.include_router(health.router)

# OAuth install + callback (verified via HMAC and state nonce)
api_router.include_router(
    auth.router,
    prefix="/auth",
    tags=["auth"],
)

# Shopify webhooks (no session - verified via HMAC)
api_router.include_router(
    webhooks.router,
    prefix="/webhooks",
    tags=["webhooks"],
)

# Storefront theme extension (public)
api_router.include_router(
    storefront.router,
    prefix="/storefront",
    tags=["storefront"],
)

# Everything below requires an installed shop session
protected_router = APIRouter(dependencies=[Depends(require_session)])

protected_router.include_router(
    settings.router,
    prefix="/settings",
    tags=["settings"],
)

protected_router.include_router(shop.router, tags=["shop"])

api_router.include_router(protected_router)
