"""Claim failure taxonomy.

Every failure the orchestrator reports is a ClaimError carrying the HTTP
status it maps to. `payload()` holds any extra fields the caller sees next
to the error message.
"""

from __future__ import annotations

from typing import Any


class ClaimError(Exception):
    status = 500

    def payload(self) -> dict[str, Any]:
        return {}


class InvalidRequest(ClaimError):
    status = 400


class SpotNotFound(ClaimError):
    status = 400

    def __init__(self, spot: str) -> None:
        super().__init__(f"Unknown spot: {spot}")
        self.spot = spot


class LevelTooLow(ClaimError):
    status = 400

    def __init__(self, spot: str, required_level: int, level: int) -> None:
        super().__init__(f"{spot} requires level {required_level} (you are level {level})")
        self.required_level = required_level
        self.level = level

    def payload(self) -> dict[str, Any]:
        return {"required_level": self.required_level}


class OnCooldown(ClaimError):
    status = 429

    def __init__(self, spot: str, retry_after: float | None = None) -> None:
        super().__init__("Still irradiated — wait 24h!")
        self.spot = spot
        self.retry_after = retry_after

    def payload(self) -> dict[str, Any]:
        if self.retry_after is None:
            return {}
        return {"retry_after": int(self.retry_after)}


class IssuerFailure(ClaimError):
    status = 500


class IssuanceUnknown(IssuerFailure):
    """The mint timed out. It may have landed, so the claim must not be retried."""


class StoreFailure(ClaimError):
    status = 500
