import asyncio
from typing import Any

import pytest

from fizzcaps.catalog import LocationCatalog
from fizzcaps.claims.orchestrator import ClaimOrchestrator
from fizzcaps.models import MintReceipt
from fizzcaps.players import PlayerRecordManager
from fizzcaps.store import MemoryStore

WALLET = "7xKXtg2CW87d97TXJSDpbD5jBkheTqA83TZRuJosgAsU"


class FakeClock:
    """Monotonic clock the tests move by hand."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class StubIssuer:
    """Records mints; set `fail_caps` / `fail_gear` to an exception to make them raise."""

    def __init__(self) -> None:
        self.minted: list[tuple[str, int]] = []
        self.collectibles: list[tuple[str, dict[str, Any]]] = []
        self.fail_caps: Exception | None = None
        self.fail_gear: Exception | None = None

    async def mint_fungible(self, amount: int, recipient: str) -> MintReceipt:
        await asyncio.sleep(0)  # let concurrent claims interleave
        if self.fail_caps is not None:
            raise self.fail_caps
        self.minted.append((recipient, amount))
        return MintReceipt(signature=f"sig-{len(self.minted)}", amount=amount, recipient=recipient)

    async def mint_collectible(self, metadata: dict[str, Any], recipient: str) -> str:
        await asyncio.sleep(0)
        if self.fail_gear is not None:
            raise self.fail_gear
        self.collectibles.append((recipient, metadata))
        return f"mint-{len(self.collectibles)}"


class ScriptedDraws:
    """Entropy source returning canned draws in order, then `default` forever."""

    def __init__(self, draws: list[float] | None = None, default: float = 0.99) -> None:
        self.pending = list(draws or [])
        self.default = default
        self.taken = 0

    def __call__(self) -> float:
        self.taken += 1
        if self.pending:
            return self.pending.pop(0)
        return self.default


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store(clock: FakeClock) -> MemoryStore:
    return MemoryStore(clock=clock)


@pytest.fixture
def issuer() -> StubIssuer:
    return StubIssuer()


@pytest.fixture
def catalog() -> LocationCatalog:
    return LocationCatalog.default()


@pytest.fixture
def players(store: MemoryStore) -> PlayerRecordManager:
    return PlayerRecordManager(store, retry_interval=0.001)


@pytest.fixture
def make_orchestrator(catalog, store, issuer, players):
    """Build an orchestrator over the shared fakes with scripted draws."""

    def _make(draws: list[float] | None = None, **kwargs: Any) -> ClaimOrchestrator:
        kwargs.setdefault("draw", ScriptedDraws(draws))
        kwargs.setdefault("issuer", issuer)
        return ClaimOrchestrator(catalog=catalog, store=store, players=players, **kwargs)

    return _make
