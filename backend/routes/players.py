"""Player record endpoints."""

from fastapi import APIRouter, Depends, Header, HTTPException, Request

from fizzcaps.claims.orchestrator import ClaimOrchestrator
from fizzcaps.models import PlayerRecord

from .deps import get_orchestrator

router = APIRouter()


@router.get("/player/{wallet}")
async def get_player(wallet: str, orchestrator: ClaimOrchestrator = Depends(get_orchestrator)):
    """Get a player's record, creating the default record on first sight."""
    record = await orchestrator.players.load_or_create(wallet)
    return record.model_dump(mode="json")


@router.put("/player/{wallet}")
async def replace_player(
    wallet: str,
    body: PlayerRecord,
    request: Request,
    x_admin_key: str = Header(default=""),
    orchestrator: ClaimOrchestrator = Depends(get_orchestrator),
):
    """Replace a player's record wholesale (admin only)."""
    admin_key = request.app.state.admin_api_key
    if not admin_key or x_admin_key != admin_key:
        raise HTTPException(403, "Admin key required")
    async with orchestrator.players.lock(wallet):
        await orchestrator.players.save(wallet, body)
    return body.model_dump(mode="json")
