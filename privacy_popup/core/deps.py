"""Dependency injection for FastAPI routes."""

from typing import Annotated
from weakref import WeakKeyDictionary

import redis.asyncio as aioredis
from fastapi import Depends

from privacy_popup.core.config import settings
from privacy_popup.stores.backends import KeyValueBackend, MemoryBackend, RedisBackend
from privacy_popup.stores.oauth_state import OAuthStateStore
from privacy_popup.stores.sessions import KeyValueSessionStore, SessionStore
from privacy_popup.stores.settings import SettingsStore

# Shared storage backend, created on first use
_backend: KeyValueBackend | None = None
_redis_client: aioredis.Redis | None = None

# One SettingsStore per backend so every request shares the same per-shop locks
_settings_stores: WeakKeyDictionary[KeyValueBackend, SettingsStore] = WeakKeyDictionary()


def get_backend() -> KeyValueBackend:
    """Return the process-wide backend: Redis when REDIS_URL is set, memory otherwise."""
    global _backend, _redis_client  # noqa: PLW0603
    if _backend is None:
        if settings.redis_url is not None:
            _redis_client = aioredis.from_url(str(settings.redis_url), decode_responses=True)
            _backend = RedisBackend(_redis_client)
        else:
            _backend = MemoryBackend()
    return _backend


async def close_backend() -> None:
    """Release the Redis connection pool on shutdown."""
    global _backend, _redis_client  # noqa: PLW0603
    if _redis_client is not None:
        await _redis_client.aclose()
    _redis_client = None
    _backend = None


def get_session_store(backend: KeyValueBackend = Depends(get_backend)) -> SessionStore:
    return KeyValueSessionStore(backend)


def get_settings_store(backend: KeyValueBackend = Depends(get_backend)) -> SettingsStore:
    store = _settings_stores.get(backend)
    if store is None:
        store = SettingsStore(backend)
        _settings_stores[backend] = store
    return store


def get_oauth_state_store(backend: KeyValueBackend = Depends(get_backend)) -> OAuthStateStore:
    return OAuthStateStore(backend)


# Type aliases for dependency injection
Backend = Annotated[KeyValueBackend, Depends(get_backend)]
Sessions = Annotated[SessionStore, Depends(get_session_store)]
SettingsRepo = Annotated[SettingsStore, Depends(get_settings_store)]
OAuthStates = Annotated[OAuthStateStore, Depends(get_oauth_state_store)]

__all__ = [
    "Backend",
    "OAuthStates",
    "Sessions",
    "SettingsRepo",
    "close_backend",
    "get_backend",
    "get_oauth_state_store",
    "get_session_store",
    "get_settings_store",
]
