"""Tests for fizzcaps.loot — drop table, raid trigger, default raid."""

import pytest

from fizzcaps.loot import (
    collectible_metadata,
    default_raid,
    is_high_risk,
    resolve_loot,
    resolve_raid,
)
from fizzcaps.models import GearItem, PlayerRecord


class TestResolveLoot:
    @pytest.mark.parametrize(
        "draw, expected",
        [
            (0.0, "Power Armor T-51b"),
            (0.02, "Power Armor T-51b"),
            (0.10, "Service Rifle"),
            (0.25, "10mm Pistol"),
        ],
    )
    def test_bands(self, draw: float, expected: str) -> None:
        drop = resolve_loot(draw)
        assert drop is not None
        assert drop.name == expected

    def test_common_draw_drops_nothing(self) -> None:
        assert resolve_loot(0.50) is None

    def test_boundaries_fall_into_more_common_band(self) -> None:
        assert resolve_loot(0.03).name == "Service Rifle"
        assert resolve_loot(0.12).name == "10mm Pistol"
        assert resolve_loot(0.30) is None

    def test_rarity_tiers(self) -> None:
        assert resolve_loot(0.01).rarity == "legendary"
        assert resolve_loot(0.05).rarity == "rare"
        assert resolve_loot(0.20).rarity == "common"

    @pytest.mark.parametrize("draw", [-0.1, 1.0, 1.5])
    def test_out_of_range_draw_rejected(self, draw: float) -> None:
        with pytest.raises(ValueError):
            resolve_loot(draw)


class TestResolveRaid:
    def test_high_risk_spot_low_draw_triggers(self) -> None:
        assert resolve_raid("Hoover Dam", 0.01) is True

    def test_high_risk_spot_draw_at_threshold_does_not_trigger(self) -> None:
        assert resolve_raid("Hoover Dam", 0.07) is False

    def test_substring_match(self) -> None:
        assert is_high_risk("Lucky 38 Penthouse")
        assert resolve_raid("Outside Black Mountain Radio", 0.0) is True

    def test_exact_case_required(self) -> None:
        assert not is_high_risk("hoover dam")

    def test_safe_spot_never_raided(self) -> None:
        for draw in (0.0, 0.01, 0.069, 0.5, 0.999):
            assert resolve_raid("Goodsprings Saloon", draw) is False


class TestDefaultRaid:
    def test_halves_hp_and_takes_newest_gear(self) -> None:
        pistol = GearItem(name="10mm Pistol", rarity="common", asset="a")
        rifle = GearItem(name="Service Rifle", rarity="rare", asset="b")
        outcome = default_raid(PlayerRecord(hp=75, gear=[pistol, rifle]))
        assert outcome.hp == 37
        assert outcome.gear == [pistol]

    def test_empty_inventory(self) -> None:
        outcome = default_raid(PlayerRecord())
        assert outcome.hp == 50
        assert outcome.gear == []


def test_collectible_metadata_carries_rarity() -> None:
    meta = collectible_metadata(resolve_loot(0.01))
    assert meta["name"] == "Power Armor T-51b"
    assert meta["rarity"] == "legendary"
    assert meta["attributes"] == [{"trait_type": "rarity", "value": "legendary"}]
