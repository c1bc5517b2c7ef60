"""Asset issuer client — mints reward caps and gear collectibles.

The orchestrator receives an issuer matching the protocol:

    async def mint_fungible(self, amount: int, recipient: str) -> MintReceipt: ...
    async def mint_collectible(self, metadata: dict, recipient: str) -> str: ...

Amounts are whole reward units; converting to ledger base units is the
issuer's job. Idempotency is NOT the issuer's job: the orchestrator only calls
it after winning the cooldown gate.

Two implementations are provided:

    HttpAssetIssuer — talks to a minting service over HTTP.
    EchoIssuer      — mints nothing, returns fabricated signatures. Useful for
                      running the game locally without a ledger.

Tests use StubIssuer (defined in conftest.py) instead.
"""

from __future__ import annotations

import itertools
import logging
from typing import Any, Protocol

import httpx

from fizzcaps.models import MintReceipt

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Protocol: every issuer implementation must match these signatures
# ---------------------------------------------------------------------------

class AssetIssuer(Protocol):
    async def mint_fungible(self, amount: int, recipient: str) -> MintReceipt: ...

    async def mint_collectible(self, metadata: dict[str, Any], recipient: str) -> str: ...


# ---------------------------------------------------------------------------
# HttpAssetIssuer
# ---------------------------------------------------------------------------

class HttpAssetIssuer:
    """Async HTTP client for the minting service.

    Endpoints:
      POST /mint         {"recipient": ..., "amount": <base units>}
                         Response: {"signature": "..."}
      POST /collectibles {"recipient": ..., "metadata": {...}}
                         Response: {"mint": "..."}

    Args:
        issuer_url: Base URL of the minting service.
        api_key:    Bearer token, or empty string if not required.
        decimals:   Ledger decimals; 25 caps at 9 decimals is 25_000_000_000.
        timeout:    HTTP timeout in seconds.
    """

    def __init__(
        self,
        issuer_url: str,
        api_key: str = "",
        decimals: int = 9,
        timeout: float = 30.0,
    ) -> None:
        self._base_url = issuer_url.rstrip("/")
        self._api_key = api_key
        self._decimals = decimals
        self._timeout = timeout

    def _headers(self) -> dict[str, str]:
        headers: dict[str, str] = {"Content-Type": "application/json"}
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"
        return headers

    def to_base_units(self, amount: int) -> int:
        return amount * 10 ** self._decimals

    async def _post(self, path: str, body: dict[str, Any]) -> dict[str, Any]:
        url = f"{self._base_url}{path}"
        logger.debug("issuer call url=%s recipient=%s", url, body.get("recipient"))
        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                resp = await client.post(url, json=body, headers=self._headers())
                resp.raise_for_status()
        # The request never reached the issuer, so nothing was minted
        except (httpx.ConnectError, httpx.ConnectTimeout) as e:
            raise IssuerError(f"Cannot connect to asset issuer at {self._base_url}") from e
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            if status >= 500:
                # Gateway or issuer fault; the mint may have landed upstream
                raise IssuerOutcomeUnknown(f"Asset issuer returned HTTP {status}") from e
            raise IssuerError(f"Asset issuer returned HTTP {status}") from e
        except httpx.TimeoutException as e:
            raise IssuerTimeout(f"Asset issuer timed out after {self._timeout}s") from e
        except httpx.TransportError as e:
            raise IssuerOutcomeUnknown(f"Asset issuer connection dropped: {e!r}") from e
        try:
            data = resp.json()
        except ValueError as e:
            raise IssuerOutcomeUnknown(f"Unexpected response format from asset issuer {path}") from e
        if not isinstance(data, dict):
            raise IssuerOutcomeUnknown(f"Unexpected response format from asset issuer {path}")
        return data

    async def mint_fungible(self, amount: int, recipient: str) -> MintReceipt:
        data = await self._post(
            "/mint", {"recipient": recipient, "amount": self.to_base_units(amount)}
        )
        signature = data.get("signature")
        if not signature:
            raise IssuerOutcomeUnknown("Unexpected response format from asset issuer /mint")
        return MintReceipt(signature=signature, amount=amount, recipient=recipient)

    async def mint_collectible(self, metadata: dict[str, Any], recipient: str) -> str:
        data = await self._post(
            "/collectibles", {"recipient": recipient, "metadata": metadata}
        )
        handle = data.get("mint")
        if not handle:
            raise IssuerOutcomeUnknown("Unexpected response format from asset issuer /collectibles")
        return handle


# ---------------------------------------------------------------------------
# EchoIssuer: no ledger, fabricated handles
# ---------------------------------------------------------------------------

class EchoIssuer:
    """Records mints in memory and returns sequential fake signatures.

    Lets the whole claim flow run end-to-end without a ledger. Nothing it
    returns exists on chain.
    """

    def __init__(self) -> None:
        self._seq = itertools.count(1)
        self.minted: list[tuple[str, int]] = []
        self.collectibles: list[tuple[str, dict[str, Any]]] = []

    async def mint_fungible(self, amount: int, recipient: str) -> MintReceipt:
        logger.debug("EchoIssuer mint amount=%d recipient=%s", amount, recipient)
        self.minted.append((recipient, amount))
        return MintReceipt(signature=f"echo-sig-{next(self._seq)}", amount=amount, recipient=recipient)

    async def mint_collectible(self, metadata: dict[str, Any], recipient: str) -> str:
        logger.debug("EchoIssuer collectible name=%s recipient=%s", metadata.get("name"), recipient)
        self.collectibles.append((recipient, metadata))
        return f"echo-mint-{next(self._seq)}"


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------

class IssuerError(RuntimeError):
    """Raised when the issuer cannot be reached or rejects a mint."""


class IssuerOutcomeUnknown(IssuerError):
    """The request reached the issuer but no usable answer came back.

    The mint may or may not have landed. Callers must not treat this as a
    definite failure.
    """


class IssuerTimeout(IssuerOutcomeUnknown):
    """The issuer did not answer in time."""
