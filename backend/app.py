import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from backend import config
from backend.routes import router
from fizzcaps.catalog import LocationCatalog
from fizzcaps.claims.errors import ClaimError
from fizzcaps.claims.orchestrator import ClaimOrchestrator
from fizzcaps.issuer import AssetIssuer, EchoIssuer, HttpAssetIssuer
from fizzcaps.store import open_store

logger = logging.getLogger(__name__)


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(ClaimError)
    async def _claim_error(request: Request, exc: ClaimError) -> JSONResponse:
        return JSONResponse(status_code=exc.status, content={"error": str(exc), **exc.payload()})

    @app.exception_handler(StarletteHTTPException)
    async def _http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code, content={"error": exc.detail}, headers=exc.headers
        )

    @app.exception_handler(RequestValidationError)
    async def _invalid_body(request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"error": "Invalid request"})

    @app.exception_handler(Exception)
    async def _generic(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(status_code=500, content={"error": "Server error"})


def build_orchestrator() -> ClaimOrchestrator:
    """Wire the orchestrator from environment configuration."""
    if config.LOCATIONS_PATH:
        catalog = LocationCatalog.from_json(Path(config.LOCATIONS_PATH))
    else:
        catalog = LocationCatalog.default()

    issuer: AssetIssuer
    if config.ISSUER_URL:
        issuer = HttpAssetIssuer(
            config.ISSUER_URL,
            api_key=config.ISSUER_API_KEY,
            decimals=config.REWARD_DECIMALS,
            timeout=config.ISSUER_TIMEOUT_SECONDS,
        )
    else:
        logger.warning("ISSUER_URL not set; using EchoIssuer (nothing is minted)")
        issuer = EchoIssuer()

    return ClaimOrchestrator(
        catalog=catalog,
        store=open_store(config.STORE_URL),
        issuer=issuer,
        reward=config.CLAIM_REWARD_CAPS,
        cooldown_seconds=config.CLAIM_COOLDOWN_SECONDS,
        explorer_url=config.EXPLORER_TX_URL,
    )


def create_app(
    orchestrator: ClaimOrchestrator | None = None,
    admin_api_key: str | None = None,
) -> FastAPI:
    """Create the API.

    Tests pass their own orchestrator and stay responsible for it. Without one,
    the app builds its orchestrator from env and closes its store on shutdown.
    """
    owned = orchestrator is None

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        yield
        if owned:
            await app.state.orchestrator.close()

    app = FastAPI(title="Atomic Fizz Caps", lifespan=lifespan)
    app.state.orchestrator = orchestrator or build_orchestrator()
    app.state.admin_api_key = config.ADMIN_API_KEY if admin_api_key is None else admin_api_key

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ORIGINS,
        allow_methods=["GET", "POST", "PUT"],
        allow_headers=["*"],
    )
    _register_exception_handlers(app)
    app.include_router(router, prefix="/api")
    return app


# Default app instance for uvicorn (configured from env)
app = create_app()
