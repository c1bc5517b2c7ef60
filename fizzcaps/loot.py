"""Loot and raid resolution.

Both resolvers are pure functions of an injected draw in [0, 1); the
orchestrator is the only place that touches an entropy source.

Gear drop table, evaluated rarest band first (closed-open intervals):

    draw < 0.03          Power Armor T-51b  (legendary)
    0.03 <= draw < 0.12  Service Rifle      (rare)
    0.12 <= draw < 0.30  10mm Pistol        (common)
    draw >= 0.30         nothing

Raids only hit spots whose name contains a high-risk landmark, and only when
an independent second draw is below RAID_CHANCE.
"""

from __future__ import annotations

from typing import Callable, NamedTuple

from fizzcaps.models import PlayerRecord, RaidOutcome, Rarity


class LootDrop(NamedTuple):
    name: str
    rarity: Rarity


LOOT_TABLE: tuple[tuple[float, LootDrop], ...] = (
    (0.03, LootDrop("Power Armor T-51b", "legendary")),
    (0.12, LootDrop("Service Rifle", "rare")),
    (0.30, LootDrop("10mm Pistol", "common")),
)

HIGH_RISK_SPOTS: tuple[str, ...] = ("Black Mountain", "Hoover Dam", "Lucky 38", "Area 51 Gate")
RAID_CHANCE = 0.07

RaidResolver = Callable[[PlayerRecord], RaidOutcome]


def _check_draw(draw: float) -> None:
    if not 0.0 <= draw < 1.0:
        raise ValueError(f"draw must be in [0, 1), got {draw!r}")


def resolve_loot(draw: float) -> LootDrop | None:
    _check_draw(draw)
    for threshold, drop in LOOT_TABLE:
        if draw < threshold:
            return drop
    return None


def is_high_risk(spot: str) -> bool:
    """Substring match: "Hoover Dam Bypass" counts as Hoover Dam."""
    return any(landmark in spot for landmark in HIGH_RISK_SPOTS)


def resolve_raid(spot: str, draw: float) -> bool:
    _check_draw(draw)
    return is_high_risk(spot) and draw < RAID_CHANCE


def default_raid(player: PlayerRecord) -> RaidOutcome:
    """Raiders halve the player's hit points and walk off with the newest gear."""
    return RaidOutcome(hp=player.hp // 2, gear=list(player.gear[:-1]))


def collectible_metadata(drop: LootDrop) -> dict[str, object]:
    """Metadata sent to the issuer when a gear drop is minted."""
    return {
        "name": drop.name,
        "symbol": "GEAR",
        "rarity": drop.rarity,
        "attributes": [{"trait_type": "rarity", "value": drop.rarity}],
    }
