"""Core domain models.

The orchestrator, the player record manager and the HTTP layer all exchange
these types. Pydantic validates every record read back from the store, so a
malformed or inconsistent record fails loudly instead of propagating.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

Rarity = Literal["common", "rare", "epic", "legendary"]

BASE_HP = 100


class Location(BaseModel):
    """A claimable spot from the static catalog."""

    model_config = ConfigDict(frozen=True)

    name: str
    level: int = Field(ge=1)  # required player level
    lat: float
    lng: float
    rarity: Rarity | None = None
    radiation: int | None = Field(default=None, ge=0)

    @model_validator(mode="after")
    def _one_tag(self) -> Location:
        if (self.rarity is None) == (self.radiation is None):
            raise ValueError(f"{self.name}: exactly one of rarity or radiation must be set")
        return self


class GearItem(BaseModel):
    """A collectible weapon or armour piece. Immutable once minted."""

    model_config = ConfigDict(frozen=True)

    name: str
    rarity: Rarity
    asset: str  # issuer handle for the minted collectible


class ConsumableItem(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    tier: Rarity
    asset: str


class PlayerRecord(BaseModel):
    """Persistent per-wallet aggregate.

    `caps` is in whole reward units, not ledger base units.
    `claimed_spots` is history only; eligibility is decided by cooldowns.
    """

    level: int = Field(default=1, ge=1)
    hp: int = Field(default=BASE_HP, ge=0)
    max_hp: int = Field(default=BASE_HP, ge=BASE_HP)
    caps: int = Field(default=0, ge=0)
    gear: list[GearItem] = Field(default_factory=list)
    consumables: list[ConsumableItem] = Field(default_factory=list)
    claimed_spots: set[str] = Field(default_factory=set)

    @model_validator(mode="after")
    def _hp_within_max(self) -> PlayerRecord:
        if self.hp > self.max_hp:
            raise ValueError(f"hp {self.hp} exceeds max_hp {self.max_hp}")
        return self


class RaidOutcome(BaseModel):
    """Replacement hit points and gear after raiders hit the player."""

    hp: int = Field(ge=0)
    gear: list[GearItem] = Field(default_factory=list)


class MintReceipt(BaseModel):
    """Proof of a fungible reward issuance."""

    signature: str
    amount: int  # whole reward units
    recipient: str


class ClaimSettlement(BaseModel):
    """Result of one successful claim, returned verbatim to the caller."""

    success: Literal[True] = True
    caps: int
    gear: GearItem | None = None
    raid: RaidOutcome | None = None
    hp: int
    lvl: int
    message: str
    receipt: str
    explorer: str | None = None
