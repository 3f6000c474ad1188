"""OAuth callback processing: verify, exchange the code, store the session."""

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from enum import StrEnum

import httpx

from privacy_popup.core.errors import (
    AppError,
    OAuthCallbackError,
    RequestTimeout,
    UpstreamError,
)
from privacy_popup.integrations.shopify.client import ShopifyClient
from privacy_popup.integrations.shopify.oauth import (
    build_embedded_app_url,
    exchange_code_for_token,
    normalize_shop_domain,
)
from privacy_popup.integrations.shopify.signatures import verify_oauth_params
from privacy_popup.schemas.session import ShopSession
from privacy_popup.stores.oauth_state import OAuthStateStore
from privacy_popup.stores.sessions import SessionStore

logger = logging.getLogger(__name__)


class CallbackState(StrEnum):
    AWAITING_CODE = "awaiting_code"
    EXCHANGING_TOKEN = "exchanging_token"
    AUTHENTICATED = "authenticated"
    FAILED = "failed"


@dataclass
class OAuthCallbackResult:
    state: CallbackState
    shop: str | None = None
    session: ShopSession | None = None
    redirect_url: str | None = None
    error: AppError | None = None


class OAuthCallbackHandler:
    """Drives a single OAuth callback from AWAITING_CODE to AUTHENTICATED or FAILED.

    Failures are returned, not raised, so a replayed or forged callback can
    never escape the handler. Nothing is written to the session store unless
    the token exchange succeeds.
    """

    def __init__(
        self,
        sessions: SessionStore,
        oauth_states: OAuthStateStore,
        *,
        secret: str,
    ) -> None:
        self.sessions = sessions
        self.oauth_states = oauth_states
        self.secret = secret
        self.state = CallbackState.AWAITING_CODE

    async def handle(self, params: Mapping[str, str]) -> OAuthCallbackResult:
        code = params.get("code", "")
        raw_shop = params.get("shop", "")

        if not code or not raw_shop:
            return self._fail(None, OAuthCallbackError("Missing code or shop parameter"))

        shop = normalize_shop_domain(raw_shop)
        if shop is None:
            return self._fail(None, OAuthCallbackError("Invalid shop domain"))

        if not verify_oauth_params(params, self.secret):
            return self._fail(shop, OAuthCallbackError("Invalid HMAC signature"))

        if not await self.oauth_states.consume(params.get("state", ""), shop):
            return self._fail(shop, OAuthCallbackError("Invalid or expired state"))

        self.state = CallbackState.EXCHANGING_TOKEN
        logger.info("Exchanging OAuth code for %s", shop)
        try:
            grant = await exchange_code_for_token(shop, code)
        except httpx.HTTPStatusError as exc:
            # Reused or expired codes land here; retrying would not help
            logger.warning(
                "Token exchange rejected for %s: %s", shop, exc.response.status_code
            )
            return self._fail(shop, OAuthCallbackError("Token exchange failed"))
        except httpx.TimeoutException:
            return self._fail(shop, RequestTimeout("Token exchange timed out"))
        except httpx.RequestError as exc:
            logger.warning("Token exchange transport error for %s: %s", shop, type(exc).__name__)
            return self._fail(
                shop, UpstreamError("Could not reach Shopify", status_code=500)
            )
        except (KeyError, ValueError):
            return self._fail(shop, UpstreamError("Malformed token response from Shopify"))

        session = ShopSession(shop=shop, access_token=grant.access_token, scope=grant.scope)
        await self.sessions.put(session)
        await self._register_webhooks(session)

        self.state = CallbackState.AUTHENTICATED
        logger.info("Shop %s authenticated", shop)
        return OAuthCallbackResult(
            state=CallbackState.AUTHENTICATED,
            shop=shop,
            session=session,
            redirect_url=build_embedded_app_url(shop),
        )

    async def _register_webhooks(self, session: ShopSession) -> None:
        try:
            await ShopifyClient(session.shop, session.access_token).register_uninstall_webhook()
        except httpx.HTTPError as exc:
            # Non-fatal: the install still succeeded
            logger.warning("Webhook registration failed for %s: %s", session.shop, exc)

    def _fail(self, shop: str | None, error: AppError) -> OAuthCallbackResult:
        self.state = CallbackState.FAILED
        logger.info("OAuth callback failed for %s: %s", shop or "<unknown>", error.message)
        return OAuthCallbackResult(state=CallbackState.FAILED, shop=shop, error=error)
