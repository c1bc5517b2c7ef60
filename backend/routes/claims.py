"""Spot claim endpoint."""

from fastapi import APIRouter, Depends

from fizzcaps.claims.orchestrator import ClaimOrchestrator

from .deps import get_orchestrator
from .models import ClaimBody

router = APIRouter()


@router.post("/claim-survival")
async def claim_survival(body: ClaimBody, orchestrator: ClaimOrchestrator = Depends(get_orchestrator)):
    """Claim a spot's reward. Errors are mapped to JSON by the app's exception handlers."""
    settlement = await orchestrator.claim(body.wallet, body.spot)
    return settlement.model_dump(mode="json")
