"""Tests for fizzcaps.players — record lifecycle, locking, progression."""

import asyncio

import pytest

from fizzcaps.models import GearItem, PlayerRecord
from fizzcaps.players import PlayerRecordManager, credit_claim, level_for
from fizzcaps.store import MemoryStore, StoreError, player_key, player_lock_key

WALLET = "wallet-1"


# ── Progression ──────────────────────────────────────────


@pytest.mark.parametrize("caps, level", [(0, 1), (999, 1), (1000, 2), (1005, 2), (4025, 5)])
def test_level_for(caps, level):
    assert level_for(caps) == level


def test_crossing_level_boundary_raises_max_hp_and_refills():
    p = PlayerRecord(caps=975, hp=40)
    assert credit_claim(p, "Goodsprings Saloon", 25) is True
    assert (p.caps, p.level, p.max_hp, p.hp) == (1000, 2, 150, 150)


def test_crossing_boundary_from_980():
    p = PlayerRecord(caps=980)
    credit_claim(p, "Goodsprings Saloon", 25)
    assert p.caps == 1005
    assert p.level == 2
    assert p.max_hp == 150


def test_no_level_change_leaves_hp_alone():
    p = PlayerRecord(caps=1100, level=2, max_hp=150, hp=90)
    assert credit_claim(p, "Goodsprings Saloon", 25) is False
    assert (p.level, p.max_hp, p.hp) == (2, 150, 90)


def test_credit_appends_gear_and_records_spot():
    pistol = GearItem(name="10mm Pistol", rarity="common", asset="m1")
    p = PlayerRecord()
    credit_claim(p, "Primm Rollercoaster", 25, pistol)
    credit_claim(p, "Primm Rollercoaster", 25)
    assert p.gear == [pistol]
    assert p.claimed_spots == {"Primm Rollercoaster"}


# ── load_or_create / save ────────────────────────────────


async def test_load_or_create_persists_default(players: PlayerRecordManager, store: MemoryStore):
    record = await players.load_or_create(WALLET)
    assert record == PlayerRecord()
    assert await store.exists(player_key(WALLET))


async def test_load_or_create_is_idempotent(players: PlayerRecordManager):
    first = await players.load_or_create(WALLET)
    second = await players.load_or_create(WALLET)
    assert first == second


async def test_save_replaces_record(players: PlayerRecordManager):
    await players.save(WALLET, PlayerRecord(caps=4000, level=5, max_hp=150, hp=150))
    loaded = await players.load_or_create(WALLET)
    assert loaded.caps == 4000
    assert loaded.level == 5


async def test_concurrent_first_creation_observes_winner(store: MemoryStore):
    """The loser of a creation race reads back the winner's record."""
    players = PlayerRecordManager(store)
    original_get = store.get
    calls = 0

    async def racing_get(key):
        nonlocal calls
        calls += 1
        if calls == 1:
            # Another instance creates the record between our read and write.
            await store.set(key, PlayerRecord(caps=500).model_dump_json())
            return None
        return await original_get(key)

    store.get = racing_get
    record = await players.load_or_create(WALLET)
    assert record.caps == 500


async def test_concurrent_load_or_create_single_record(players: PlayerRecordManager):
    records = await asyncio.gather(*(players.load_or_create(WALLET) for _ in range(10)))
    assert all(r == records[0] for r in records)


# ── Locking ──────────────────────────────────────────────


async def test_lock_serialises_read_modify_write(players: PlayerRecordManager):
    async def add(amount: int):
        async with players.lock(WALLET):
            record = await players.load_or_create(WALLET)
            await asyncio.sleep(0)
            record.caps += amount
            await players.save(WALLET, record)

    await asyncio.gather(*(add(25) for _ in range(8)))
    assert (await players.load_or_create(WALLET)).caps == 200


async def test_lock_released_after_block(players: PlayerRecordManager, store: MemoryStore):
    async with players.lock(WALLET):
        assert await store.exists(player_lock_key(WALLET))
    assert not await store.exists(player_lock_key(WALLET))


async def test_lock_released_on_error(players: PlayerRecordManager, store: MemoryStore):
    with pytest.raises(RuntimeError):
        async with players.lock(WALLET):
            raise RuntimeError("boom")
    assert not await store.exists(player_lock_key(WALLET))


async def test_lock_timeout(store: MemoryStore):
    await store.set(player_lock_key(WALLET), "someone-else", ttl=60)
    players = PlayerRecordManager(store, lease_timeout=0.02, retry_interval=0.005)
    with pytest.raises(StoreError, match="timed out"):
        async with players.lock(WALLET):
            pass


async def test_lock_does_not_release_foreign_lease(players: PlayerRecordManager, store: MemoryStore):
    async with players.lock(WALLET):
        # Our lease expired and another holder took over.
        await store.set(player_lock_key(WALLET), "other-token", ttl=60)
    assert await store.get(player_lock_key(WALLET)) == "other-token"
