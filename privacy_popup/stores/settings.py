"""Per-shop popup settings persistence."""

import asyncio
import logging
from collections import defaultdict
from typing import Any

import pydantic

from privacy_popup.core.errors import ValidationError, plain_errors
from privacy_popup.schemas.settings import DEFAULT_POPUP_SETTINGS, PopupSettings
from privacy_popup.stores.backends import KeyValueBackend

logger = logging.getLogger(__name__)


class SettingsStore:
    """Reads and replaces the single PopupSettings record of each shop.

    Writes for one shop run under that shop's lock, so two saves racing for the
    same shop land one after the other and the record always equals exactly
    one of them. Reads never take the lock.
    """

    def __init__(self, backend: KeyValueBackend) -> None:
        self._backend = backend
        self._locks: defaultdict[str, asyncio.Lock] = defaultdict(asyncio.Lock)

    @staticmethod
    def _key(shop: str) -> str:
        return f"settings:{shop}"

    async def get(self, shop: str) -> PopupSettings:
        """Return the shop's settings, or the defaults before the first save."""
        raw = await self._backend.get(self._key(shop))
        if raw is None:
            return DEFAULT_POPUP_SETTINGS.model_copy()
        return PopupSettings.model_validate_json(raw)

    async def set(self, shop: str, data: PopupSettings | dict[str, Any]) -> PopupSettings:
        """Validate and fully replace the shop's settings.

        Raises:
            ValidationError: If the record is incomplete or out of range. The
                stored record is left untouched.
        """
        record = self.validate(data)
        async with self._locks[shop]:
            await self._backend.set(self._key(shop), record.model_dump_json())
        logger.info("Saved popup settings for %s", shop)
        return record

    async def delete(self, shop: str) -> None:
        """Drop the shop's record and its write lock (used on uninstall)."""
        lock = self._locks[shop]
        async with lock:
            await self._backend.delete(self._key(shop))
            if self._locks.get(shop) is lock:
                del self._locks[shop]

    @staticmethod
    def validate(data: PopupSettings | dict[str, Any]) -> PopupSettings:
        if isinstance(data, PopupSettings):
            # Re-run validation so records built with model_construct can't skip checks
            data = data.model_dump()
        try:
            return PopupSettings.model_validate(data)
        except pydantic.ValidationError as exc:
            raise ValidationError("Invalid popup settings", details=plain_errors(exc.errors())) from exc
