"""Key-value backends shared by the session, settings and OAuth state stores."""

import asyncio
import time
from typing import Protocol, runtime_checkable

import redis.asyncio as aioredis


@runtime_checkable
class KeyValueBackend(Protocol):
    """Minimal async string key-value interface.

    ``pop`` must read and remove a key atomically so single-use values (OAuth
    nonces) cannot be consumed twice.
    """

    async def get(self, key: str) -> str | None: ...

    async def set(self, key: str, value: str, ttl: int | None = None) -> None: ...

    async def delete(self, key: str) -> None: ...

    async def pop(self, key: str) -> str | None: ...

    async def ping(self) -> bool: ...


class MemoryBackend:
    """Process-local backend for development and tests.

    Values are lost on restart; use Redis anywhere sessions must survive one.
    """

    def __init__(self) -> None:
        self._data: dict[str, tuple[str, float | None]] = {}
        self._lock = asyncio.Lock()

    def _live(self, key: str) -> str | None:
        entry = self._data.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if expires_at is not None and time.monotonic() >= expires_at:
            del self._data[key]
            return None
        return value

    async def get(self, key: str) -> str | None:
        return self._live(key)

    async def set(self, key: str, value: str, ttl: int | None = None) -> None:
        expires_at = time.monotonic() + ttl if ttl else None
        self._data[key] = (value, expires_at)

    async def delete(self, key: str) -> None:
        self._data.pop(key, None)

    async def pop(self, key: str) -> str | None:
        async with self._lock:
            value = self._live(key)
            self._data.pop(key, None)
            return value

    async def ping(self) -> bool:
        return True


class RedisBackend:
    """Redis-backed storage. Expects a client created with ``decode_responses=True``."""

    def __init__(self, client: aioredis.Redis, *, namespace: str = "privacy_popup") -> None:
        self._redis = client
        self._namespace = namespace

    def _key(self, key: str) -> str:
        return f"{self._namespace}:{key}"

    async def get(self, key: str) -> str | None:
        value: str | None = await self._redis.get(self._key(key))
        return value

    async def set(self, key: str, value: str, ttl: int | None = None) -> None:
        await self._redis.set(self._key(key), value, ex=ttl)

    async def delete(self, key: str) -> None:
        await self._redis.delete(self._key(key))

    async def pop(self, key: str) -> str | None:
        value: str | None = await self._redis.getdel(self._key(key))
        return value

    async def ping(self) -> bool:
        return bool(await self._redis.ping())
