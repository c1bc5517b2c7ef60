"""Key-value state store with per-key expiry.

The orchestrator and the player record manager talk to a store through the
StateStore protocol. All cross-request synchronisation funnels through
`set_if_absent`, so it must be atomic in every implementation:

    MemoryStore  — single-process dict with TTLs. Used for development and tests.
    RedisStore   — redis.asyncio client. The durable source of truth shared by
                   every server instance.

Key layout:

    player:{wallet}                  player record (JSON)
    lock:player:{wallet}             per-wallet lease token
    cooldown:claim:{wallet}:{spot}   cooldown marker (mint signature)
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Callable, Protocol

import redis.asyncio as aioredis
from redis.exceptions import RedisError

logger = logging.getLogger(__name__)


def player_key(wallet: str) -> str:
    return f"player:{wallet}"


def player_lock_key(wallet: str) -> str:
    return f"lock:player:{wallet}"


def cooldown_key(wallet: str, spot: str) -> str:
    return f"cooldown:claim:{wallet}:{spot}"


# ---------------------------------------------------------------------------
# Protocol
# ---------------------------------------------------------------------------

class StateStore(Protocol):
    async def exists(self, key: str) -> bool: ...

    async def set_if_absent(self, key: str, value: str, ttl: int | None = None) -> bool: ...

    async def get(self, key: str) -> str | None: ...

    async def set(self, key: str, value: str, ttl: int | None = None) -> None: ...

    async def delete(self, key: str) -> None: ...

    async def ttl(self, key: str) -> float | None: ...

    async def close(self) -> None: ...


class StoreError(RuntimeError):
    """Raised when the backing store cannot be reached or rejects a command."""


# ---------------------------------------------------------------------------
# MemoryStore
# ---------------------------------------------------------------------------

class MemoryStore:
    """In-process store. Expired keys are dropped lazily on access.

    Args:
        clock: monotonic time source in seconds. Tests pass a fake clock to
               move past expiry without sleeping.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._lock = threading.Lock()
        self._data: dict[str, tuple[str, float | None]] = {}

    def _live_locked(self, key: str) -> tuple[str, float | None] | None:
        entry = self._data.get(key)
        if entry is None:
            return None
        _, expires_at = entry
        if expires_at is not None and expires_at <= self._clock():
            del self._data[key]
            return None
        return entry

    def _expiry(self, ttl: int | None) -> float | None:
        if ttl is None:
            return None
        if ttl <= 0:
            raise ValueError("ttl must be positive")
        return self._clock() + ttl

    async def exists(self, key: str) -> bool:
        with self._lock:
            return self._live_locked(key) is not None

    async def set_if_absent(self, key: str, value: str, ttl: int | None = None) -> bool:
        with self._lock:
            if self._live_locked(key) is not None:
                return False
            self._data[key] = (value, self._expiry(ttl))
            return True

    async def get(self, key: str) -> str | None:
        with self._lock:
            entry = self._live_locked(key)
            return entry[0] if entry else None

    async def set(self, key: str, value: str, ttl: int | None = None) -> None:
        with self._lock:
            self._data[key] = (value, self._expiry(ttl))

    async def delete(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)

    async def ttl(self, key: str) -> float | None:
        with self._lock:
            entry = self._live_locked(key)
            if entry is None or entry[1] is None:
                return None
            return entry[1] - self._clock()

    async def close(self) -> None:
        pass


# ---------------------------------------------------------------------------
# RedisStore
# ---------------------------------------------------------------------------

class RedisStore:
    """Store backed by Redis. `set_if_absent` maps to SET NX EX."""

    def __init__(self, client: aioredis.Redis) -> None:
        self._redis = client

    @classmethod
    def from_url(cls, url: str) -> RedisStore:
        return cls(aioredis.from_url(url, decode_responses=True))

    async def exists(self, key: str) -> bool:
        try:
            return bool(await self._redis.exists(key))
        except RedisError as e:
            raise StoreError(f"redis EXISTS {key} failed: {e}") from e

    async def set_if_absent(self, key: str, value: str, ttl: int | None = None) -> bool:
        try:
            created = await self._redis.set(key, value, nx=True, ex=ttl)
        except RedisError as e:
            raise StoreError(f"redis SET NX {key} failed: {e}") from e
        return bool(created)

    async def get(self, key: str) -> str | None:
        try:
            return await self._redis.get(key)
        except RedisError as e:
            raise StoreError(f"redis GET {key} failed: {e}") from e

    async def set(self, key: str, value: str, ttl: int | None = None) -> None:
        try:
            await self._redis.set(key, value, ex=ttl)
        except RedisError as e:
            raise StoreError(f"redis SET {key} failed: {e}") from e

    async def delete(self, key: str) -> None:
        try:
            await self._redis.delete(key)
        except RedisError as e:
            raise StoreError(f"redis DEL {key} failed: {e}") from e

    async def ttl(self, key: str) -> float | None:
        try:
            remaining = await self._redis.ttl(key)
        except RedisError as e:
            raise StoreError(f"redis TTL {key} failed: {e}") from e
        # -2: no such key, -1: key without expiry
        if remaining is None or remaining < 0:
            return None
        return float(remaining)

    async def close(self) -> None:
        await self._redis.aclose()


def open_store(url: str) -> StateStore:
    """Build a store from a URL: memory:// or redis://, rediss://, unix://."""
    if not url or url.startswith("memory://"):
        logger.info("using in-memory state store")
        return MemoryStore()
    logger.info("using redis state store")
    return RedisStore.from_url(url)
