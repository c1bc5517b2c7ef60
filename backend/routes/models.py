"""Pydantic request models for API endpoints."""

from pydantic import BaseModel


class ClaimBody(BaseModel):
    # Optional so a missing field yields the claim error, not a schema error.
    wallet: str | None = None
    spot: str | None = None
