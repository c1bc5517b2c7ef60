"""Location catalog endpoints."""

from fastapi import APIRouter, Depends, HTTPException

from fizzcaps.claims.orchestrator import ClaimOrchestrator
from fizzcaps.loot import is_high_risk

from .deps import get_orchestrator

router = APIRouter()


@router.get("/locations")
async def list_locations(orchestrator: ClaimOrchestrator = Depends(get_orchestrator)):
    """List every claimable spot."""
    return [loc.model_dump() for loc in orchestrator.catalog.all()]


@router.get("/locations/{name}")
async def get_location(name: str, orchestrator: ClaimOrchestrator = Depends(get_orchestrator)):
    """Get one spot, including whether raiders prowl there."""
    location = orchestrator.catalog.lookup(name)
    if location is None:
        raise HTTPException(404, "Location not found")
    return {**location.model_dump(), "high_risk": is_high_risk(location.name)}
