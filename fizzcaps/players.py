"""Player record manager and progression rules.

Records live in the state store as JSON under player:{wallet}. Two rules keep
concurrent requests from corrupting them:

  - First-time creation goes through set_if_absent, so the loser of two
    concurrent initialisations reads the winner's record back.
  - Every read-modify-write runs inside `lock(wallet)`, a lease taken with
    set_if_absent on lock:player:{wallet}. The lease has a TTL so a crashed
    holder cannot wedge the wallet forever.

Progression: level = caps // 1000 + 1. Each claim that raises the level adds
LEVEL_UP_HP to max_hp once and refills hp.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fizzcaps.models import GearItem, PlayerRecord
from fizzcaps.store import StateStore, StoreError, player_key, player_lock_key

logger = logging.getLogger(__name__)

CAPS_PER_LEVEL = 1000
LEVEL_UP_HP = 50


def level_for(caps: int) -> int:
    return caps // CAPS_PER_LEVEL + 1


def credit_claim(
    player: PlayerRecord, spot: str, caps: int, gear: GearItem | None = None
) -> bool:
    """Apply a claim's reward to `player` in place. Returns True on level-up."""
    player.caps += caps
    if gear is not None:
        player.gear.append(gear)
    player.claimed_spots.add(spot)

    new_level = level_for(player.caps)
    leveled_up = new_level > player.level
    player.level = new_level
    if leveled_up:
        player.max_hp += LEVEL_UP_HP
        player.hp = player.max_hp
    return leveled_up


class PlayerRecordManager:
    """Loads, creates and saves player records.

    Args:
        store:          state store holding the records.
        lease_ttl:      seconds before an abandoned lease expires.
        lease_timeout:  seconds to wait for a lease before giving up.
        retry_interval: pause between lease attempts.
    """

    def __init__(
        self,
        store: StateStore,
        lease_ttl: int = 10,
        lease_timeout: float = 5.0,
        retry_interval: float = 0.05,
    ) -> None:
        self._store = store
        self._lease_ttl = lease_ttl
        self._lease_timeout = lease_timeout
        self._retry_interval = retry_interval

    async def load_or_create(self, wallet: str) -> PlayerRecord:
        key = player_key(wallet)
        raw = await self._store.get(key)
        if raw is None:
            fresh = PlayerRecord()
            if await self._store.set_if_absent(key, fresh.model_dump_json()):
                logger.info("created player record for %s", wallet)
                return fresh
            # Lost the creation race; the winner's record is authoritative.
            raw = await self._store.get(key)
            if raw is None:
                raise StoreError(f"player record for {wallet} vanished after creation")
        return PlayerRecord.model_validate_json(raw)

    async def save(self, wallet: str, record: PlayerRecord) -> None:
        """Full replace. Callers must hold `lock(wallet)`."""
        await self._store.set(player_key(wallet), record.model_dump_json())

    @asynccontextmanager
    async def lock(self, wallet: str) -> AsyncIterator[None]:
        key = player_lock_key(wallet)
        token = uuid.uuid4().hex
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self._lease_timeout
        while not await self._store.set_if_absent(key, token, self._lease_ttl):
            if loop.time() >= deadline:
                raise StoreError(f"timed out waiting for player lock on {wallet}")
            await asyncio.sleep(self._retry_interval)
        logger.debug("acquired player lock for %s", wallet)
        try:
            yield
        finally:
            # Only release our own lease; an expired one may belong to someone else now.
            if await self._store.get(key) == token:
                await self._store.delete(key)
