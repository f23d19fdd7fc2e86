import asyncio
import hmac
import logging
from contextlib import asynccontextmanager

from dotenv import load_dotenv
load_dotenv()  # Load .env file before importing settings

from fastapi import FastAPI, BackgroundTasks, Header, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded

from core.config import settings
from core.rate_limiter import limiter, rate_limit_exceeded_handler, RateLimits
from src.rail_bc.network.infrastructure.services import DatasetError
from src.rail_bc.routing.network_store import NetworkStore

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format='%(asctime)s - %(levelname)s - %(message)s',
)
logger = logging.getLogger(__name__)


def _load_network_store() -> None:
    """Load the rail network into memory (runs in a worker thread)."""
    store = NetworkStore.get_instance()
    try:
        store.load(settings.DATA_DIR)
        # Build the default graph up front so the first search is fast
        store.snapshot(settings.routing.graph_parameters())
    except DatasetError as e:
        logger.warning(f"Network data could not be loaded from {settings.DATA_DIR}: {e}")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Load network data into memory before serving requests."""
    logger.info("Loading rail network into memory...")
    loop = asyncio.get_event_loop()
    await loop.run_in_executor(None, _load_network_store)
    yield


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    # Settings validation is done automatically in core/config.py on import

    app = FastAPI(
        title="Mofurail API",
        description="Route search over the Mofurail rail network",
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # CORS middleware - Public API, no credentials needed
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )

    # Rate limiting
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)

    # Register routers
    from adapters.http.api.rail.routers import route_search_router
    app.include_router(route_search_router, prefix="/api/v1")

    @app.get("/health")
    @limiter.limit(RateLimits.HEALTH)
    async def health_check(request: Request):
        """Health check endpoint.

        Returns 503 until the rail network is loaded into memory.
        """
        store = NetworkStore.get_instance()

        if not store.is_loaded:
            return JSONResponse(
                status_code=503,
                content={
                    "status": "loading",
                    "message": "Rail network data is being loaded into memory"
                }
            )

        return {
            "status": "healthy",
            "network_store": {
                "loaded": True,
                "version": store.version,
                "load_time_seconds": round(store.load_time_seconds, 2),
                "stats": store.stats
            }
        }

    @app.post("/admin/reload-network")
    @limiter.limit(RateLimits.ADMIN_RELOAD)
    async def reload_network(
        request: Request,
        background_tasks: BackgroundTasks,
        x_admin_token: str = Header(None, alias="X-Admin-Token")
    ):
        """Reload network data without restarting the server.

        The old data keeps serving requests until the new snapshot is ready.

        Requires X-Admin-Token header for authentication.
        """
        # Constant-time comparison to prevent timing attacks
        if not x_admin_token or not settings.ADMIN_TOKEN:
            raise HTTPException(status_code=401, detail="Unauthorized: Missing admin token")
        if not hmac.compare_digest(settings.ADMIN_TOKEN, x_admin_token):
            raise HTTPException(status_code=401, detail="Unauthorized: Invalid admin token")

        def do_reload():
            try:
                NetworkStore.get_instance().reload(settings.DATA_DIR)
            except DatasetError as e:
                logger.warning(f"Network reload failed, keeping previous data: {e}")

        background_tasks.add_task(do_reload)

        return {
            "status": "reload_initiated",
            "message": "Network data reload started in background"
        }

    return app


app = create_app()
