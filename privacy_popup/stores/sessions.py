"""Shop session persistence."""

import logging
from typing import Protocol, runtime_checkable

from cryptography.fernet import InvalidToken

from privacy_popup.core.encryption import decrypt_token, encrypt_token
from privacy_popup.schemas.session import ShopSession
from privacy_popup.stores.backends import KeyValueBackend

logger = logging.getLogger(__name__)


@runtime_checkable
class SessionStore(Protocol):
    """Session persistence interface used by the OAuth handler and the auth gate."""

    async def get(self, shop: str) -> ShopSession | None: ...

    async def put(self, session: ShopSession) -> None: ...

    async def delete(self, shop: str) -> None: ...


class KeyValueSessionStore:
    """Stores one session per shop on a key-value backend, token encrypted."""

    def __init__(self, backend: KeyValueBackend) -> None:
        self._backend = backend

    @staticmethod
    def _key(shop: str) -> str:
        return f"session:{shop}"

    async def get(self, shop: str) -> ShopSession | None:
        raw = await self._backend.get(self._key(shop))
        if raw is None:
            return None

        stored = ShopSession.model_validate_json(raw)
        try:
            access_token = decrypt_token(stored.access_token)
        except InvalidToken:
            # Secret rotated since install; the shop has to reauthorize
            logger.warning("Discarding undecryptable session for %s", shop)
            await self._backend.delete(self._key(shop))
            return None
        return stored.model_copy(update={"access_token": access_token})

    async def put(self, session: ShopSession) -> None:
        stored = session.model_copy(update={"access_token": encrypt_token(session.access_token)})
        ttl = None
        if session.expires_at is not None:
            remaining = int((session.expires_at - session.created_at).total_seconds())
            ttl = max(remaining, 1)
        await self._backend.set(self._key(session.shop), stored.model_dump_json(), ttl=ttl)

    async def delete(self, shop: str) -> None:
        await self._backend.delete(self._key(shop))
