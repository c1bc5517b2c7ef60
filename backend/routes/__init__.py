"""FastAPI API endpoints under /api.

Endpoint groups: health, locations (catalog), player (record read/replace),
claim (the settlement flow). Shared collaborators hang off app.state and are
reached through the dependencies in deps.py.
"""

from fastapi import APIRouter

from .claims import router as claims_router
from .locations import router as locations_router
from .players import router as players_router
from .settings import router as settings_router

router = APIRouter()
router.include_router(settings_router)
router.include_router(locations_router)
router.include_router(players_router)
router.include_router(claims_router)
