"""Single-use OAuth ``state`` nonces issued when an install starts."""

import secrets

from privacy_popup.stores.backends import KeyValueBackend

NONCE_TTL_SECONDS = 600  # 10 minutes


class OAuthStateStore:
    def __init__(self, backend: KeyValueBackend) -> None:
        self._backend = backend

    async def issue(self, shop: str) -> str:
        """Create a nonce bound to ``shop``."""
        nonce = secrets.token_urlsafe(16)
        await self._backend.set(f"oauth_state:{nonce}", shop, ttl=NONCE_TTL_SECONDS)
        return nonce

    async def consume(self, nonce: str, shop: str) -> bool:
        """Return True if ``nonce`` was issued for ``shop``. The nonce is spent either way."""
        if not nonce:
            return False
        expected_shop = await self._backend.pop(f"oauth_state:{nonce}")
        return expected_shop is not None and expected_shop == shop
