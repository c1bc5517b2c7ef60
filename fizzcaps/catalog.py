"""Static location catalog.

Loaded once at startup and never mutated afterwards, so lookups need no
synchronisation. A JSON file (a list of Location objects) can replace the
built-in table.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from types import MappingProxyType
from typing import Iterable

from fizzcaps.models import Location

logger = logging.getLogger(__name__)

DEFAULT_LOCATIONS: tuple[Location, ...] = (
    Location(name="Goodsprings Saloon", lat=35.8324, lng=-115.4320, level=1, rarity="common"),
    Location(name="Primm Rollercoaster", lat=35.6145, lng=-115.3845, level=2, rarity="common"),
    Location(name="Novac Motel", lat=35.0525, lng=-114.8247, level=5, rarity="rare"),
    Location(name="Hoover Dam", lat=36.016, lng=-114.738, level=12, rarity="epic"),
    Location(name="The Strip Gate", lat=36.1147, lng=-115.1728, level=15, rarity="epic"),
    Location(name="Lucky 38", lat=36.147, lng=-115.156, level=18, rarity="epic"),
    Location(name="Black Mountain", lat=35.9310, lng=-115.0440, level=20, rarity="epic"),
    Location(name="Area 51 Gate", lat=37.2431, lng=-115.7930, level=45, rarity="legendary"),
    Location(name="Vault 77 (Secret)", lat=36.170, lng=-115.140, level=77, rarity="legendary"),
    Location(name="Chernobyl Pripyat", lat=51.389, lng=30.099, level=99, rarity="legendary"),
    Location(name="Fukushima Daiichi", lat=37.421, lng=141.032, level=99, rarity="legendary"),
    Location(name="Deathclaw Promontory", lat=36.1000, lng=-114.9000, level=45, rarity="legendary"),
    Location(name="Los Alamos Lab", lat=35.875, lng=-106.300, level=50, rarity="legendary"),
    Location(name="Yucca Mountain", lat=37.000, lng=-116.800, level=50, rarity="legendary"),
    Location(name="Glowing Sea", lat=42.200, lng=-71.400, level=50, rarity="legendary"),
    Location(name="Mothership Zeta", lat=0, lng=0, level=99, rarity="legendary"),
)


class LocationCatalog:
    def __init__(self, locations: Iterable[Location]) -> None:
        by_name: dict[str, Location] = {}
        for loc in locations:
            if loc.name in by_name:
                raise ValueError(f"Duplicate location name: {loc.name!r}")
            by_name[loc.name] = loc
        self._by_name = MappingProxyType(by_name)

    @classmethod
    def default(cls) -> LocationCatalog:
        return cls(DEFAULT_LOCATIONS)

    @classmethod
    def from_json(cls, path: Path) -> LocationCatalog:
        """Load a catalog from a JSON array of location objects."""
        raw = json.loads(path.read_text())
        if not isinstance(raw, list):
            raise ValueError(f"{path}: catalog must be a JSON array, got {type(raw).__name__}")
        catalog = cls(Location.model_validate(item) for item in raw)
        logger.info("loaded %d locations from %s", len(catalog), path)
        return catalog

    def lookup(self, name: str) -> Location | None:
        return self._by_name.get(name)

    def all(self) -> list[Location]:
        return list(self._by_name.values())

    def __len__(self) -> int:
        return len(self._by_name)

    def __contains__(self, name: object) -> bool:
        return name in self._by_name
