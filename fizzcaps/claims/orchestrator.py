"""Claim orchestrator — settles one spot claim end-to-end.

Claim flow:
  1. Lookup       resolve the spot in the catalog (SpotNotFound).
  2. Eligibility  cooldown marker present → OnCooldown; player level below the
                  spot's requirement → LevelTooLow. Then take the cooldown gate
                  with set_if_absent: of any number of concurrent claims for
                  the same (wallet, spot), exactly one gets past this point.
  3. Issuance     mint the fixed caps reward. A definite issuer failure
                  releases the gate. An unknown outcome (timeout, 5xx, dropped
                  connection) keeps it: the mint may have landed.
  4. Loot         draw gear (minted as a collectible) and, for high-risk
                  spots only, a raid.
  5. Mutation     under the per-wallet lock: credit caps, append gear, record
                  the spot, recompute level, apply the raid last. Persist.
  6. Cooldown     rewrite the marker with the mint signature and a full TTL.
  7. Settlement   return the ClaimSettlement.

Nothing after step 3 can undo the mint. If the store fails there, the player
is under-credited relative to the ledger; the error log carries the receipt
for out-of-band reconciliation.
"""

from __future__ import annotations

import logging
import random
from typing import Callable

from fizzcaps.catalog import LocationCatalog
from fizzcaps.claims.errors import (
    InvalidRequest,
    IssuanceUnknown,
    IssuerFailure,
    LevelTooLow,
    OnCooldown,
    SpotNotFound,
    StoreFailure,
)
from fizzcaps.issuer import AssetIssuer, IssuerError, IssuerOutcomeUnknown
from fizzcaps.loot import (
    RaidResolver,
    collectible_metadata,
    default_raid,
    is_high_risk,
    resolve_loot,
    resolve_raid,
)
from fizzcaps.models import ClaimSettlement, GearItem, MintReceipt, RaidOutcome
from fizzcaps.players import PlayerRecordManager, credit_claim
from fizzcaps.store import StateStore, StoreError, cooldown_key

logger = logging.getLogger(__name__)

REWARD_CAPS = 25
COOLDOWN_SECONDS = 24 * 60 * 60

_PENDING = "pending"


class ClaimOrchestrator:
    """Composes catalog, store, player records and issuer into the claim flow.

    Args:
        catalog:          spot catalog.
        store:            state store for cooldown markers.
        issuer:           asset issuer used for caps and gear.
        players:          player record manager; defaults to one over `store`.
        raid:             replacement hp/gear for a raided player.
        draw:             entropy source returning floats in [0, 1).
        reward:           caps granted per claim.
        cooldown_seconds: cooldown window per (wallet, spot).
        explorer_url:     audit link template with a {signature} field, or "".
    """

    def __init__(
        self,
        *,
        catalog: LocationCatalog,
        store: StateStore,
        issuer: AssetIssuer,
        players: PlayerRecordManager | None = None,
        raid: RaidResolver = default_raid,
        draw: Callable[[], float] = random.random,
        reward: int = REWARD_CAPS,
        cooldown_seconds: int = COOLDOWN_SECONDS,
        explorer_url: str = "",
    ) -> None:
        self.catalog = catalog
        self.players = players or PlayerRecordManager(store)
        self._store = store
        self._issuer = issuer
        self._raid = raid
        self._draw = draw
        self._reward = reward
        self._cooldown = cooldown_seconds
        self._explorer_url = explorer_url

    async def close(self) -> None:
        """Release the state store's connections."""
        await self._store.close()

    async def claim(self, wallet: str | None, spot: str | None) -> ClaimSettlement:
        wallet = (wallet or "").strip()
        spot = (spot or "").strip()
        if not wallet or not spot:
            raise InvalidRequest("Missing wallet or spot")
        try:
            return await self._claim(wallet, spot)
        except StoreError as e:
            logger.exception("store failure during claim wallet=%s spot=%s", wallet, spot)
            raise StoreFailure("Server error") from e

    async def _claim(self, wallet: str, spot: str) -> ClaimSettlement:
        # 1. Lookup
        location = self.catalog.lookup(spot)
        if location is None:
            raise SpotNotFound(spot)

        # 2. Eligibility
        gate = cooldown_key(wallet, spot)
        if await self._store.exists(gate):
            raise await self._on_cooldown(gate, wallet, spot)
        player = await self.players.load_or_create(wallet)
        if player.level < location.level:
            logger.warning(
                "claim rejected wallet=%s spot=%s level=%d required=%d",
                wallet, spot, player.level, location.level,
            )
            raise LevelTooLow(spot, location.level, player.level)
        if not await self._store.set_if_absent(gate, _PENDING, self._cooldown):
            raise await self._on_cooldown(gate, wallet, spot)

        # 3. Issuance
        receipt = await self._mint_caps(gate, wallet, spot)

        # 4. Loot
        gear = await self._mint_gear(wallet, spot, receipt)
        raided = is_high_risk(spot) and resolve_raid(spot, self._draw())

        try:
            # 5. Mutation
            raid: RaidOutcome | None = None
            async with self.players.lock(wallet):
                player = await self.players.load_or_create(wallet)
                credit_claim(player, spot, self._reward, gear)
                if raided:
                    outcome = self._raid(player)
                    player.gear = list(outcome.gear)
                    player.hp = min(outcome.hp, player.max_hp)
                    raid = RaidOutcome(hp=player.hp, gear=list(player.gear))
                await self.players.save(wallet, player)

            # 6. Cooldown
            await self._store.set(gate, receipt.signature, self._cooldown)
        except StoreError:
            logger.error(
                "caps minted but state not committed wallet=%s spot=%s receipt=%s; needs reconciliation",
                wallet, spot, receipt.signature,
            )
            raise

        # 7. Settlement
        message = f"{spot} LOOTED! +{self._reward} CAPS"
        if gear:
            message += " + GEAR!"
        if raid:
            message += " → RAIDED!"
        logger.info(
            "claim settled wallet=%s spot=%s gear=%s raid=%s level=%d",
            wallet, spot, gear.name if gear else None, bool(raid), player.level,
        )
        return ClaimSettlement(
            caps=self._reward,
            gear=gear,
            raid=raid,
            hp=player.hp,
            lvl=player.level,
            message=message,
            receipt=receipt.signature,
            explorer=self._explorer_link(receipt),
        )

    async def _on_cooldown(self, gate: str, wallet: str, spot: str) -> OnCooldown:
        logger.warning("claim rejected wallet=%s spot=%s: on cooldown", wallet, spot)
        return OnCooldown(spot, await self._store.ttl(gate))

    async def _mint_caps(self, gate: str, wallet: str, spot: str) -> MintReceipt:
        try:
            return await self._issuer.mint_fungible(self._reward, wallet)
        except IssuerOutcomeUnknown as e:
            logger.error("caps mint outcome unknown wallet=%s spot=%s: %s", wallet, spot, e)
            raise IssuanceUnknown(
                "Reward issuance outcome unknown. Check your wallet before claiming again."
            ) from e
        except IssuerError as e:
            logger.error("caps mint failed wallet=%s spot=%s: %s", wallet, spot, e)
            await self._store.delete(gate)
            logger.warning("released cooldown gate wallet=%s spot=%s", wallet, spot)
            raise IssuerFailure("Server error") from e

    async def _mint_gear(self, wallet: str, spot: str, receipt: MintReceipt) -> GearItem | None:
        drop = resolve_loot(self._draw())
        if drop is None:
            return None
        try:
            asset = await self._issuer.mint_collectible(collectible_metadata(drop), wallet)
        except IssuerError as e:
            logger.error(
                "gear mint failed after caps minted wallet=%s spot=%s receipt=%s: %s",
                wallet, spot, receipt.signature, e,
            )
            raise IssuerFailure("Server error") from e
        return GearItem(name=drop.name, rarity=drop.rarity, asset=asset)

    def _explorer_link(self, receipt: MintReceipt) -> str | None:
        if not self._explorer_url:
            return None
        return self._explorer_url.format(signature=receipt.signature)
