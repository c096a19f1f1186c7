"""FastAPI app, CORS, error mapping, and route registration."""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from soundgate.config import LOG_LEVEL, RECONCILE_ON_STARTUP

# Configure logging in the worker process (so INFO logs are visible with uvicorn --reload)
logging.basicConfig(
    level=LOG_LEVEL,
    format="%(levelname)s: %(name)s: %(message)s",
)

from soundgate.api.state import AppState, get_state
from soundgate.core.activity import configure_activity_log
from soundgate.core.errors import SoundgateError

# Import routes after state to avoid circular imports
from soundgate.api.routes import admin, health, profile, search, tracks

__all__ = ["app", "AppState", "get_state"]

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    state = get_state()
    configure_activity_log(state.activity_log_path)
    if RECONCILE_ON_STARTUP:
        state.lifecycle.reconcile()
    logger.info("Serving track store from %s", state.data_dir)
    yield


app = FastAPI(
    title="Soundgate API",
    description="Moderated track uploads and streaming for independent artists",
    lifespan=lifespan,
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["Content-Range", "Content-Length", "Accept-Ranges"],
)


@app.exception_handler(SoundgateError)
async def soundgate_error_handler(request: Request, exc: SoundgateError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message, "error": exc.kind})


app.include_router(health.router, prefix="/api/health", tags=["health"])
app.include_router(profile.router, prefix="/api/profile", tags=["profile"])
app.include_router(tracks.router, prefix="/api/tracks", tags=["tracks"])
app.include_router(search.router, prefix="/api/search", tags=["search"])
app.include_router(admin.router, prefix="/api/admin", tags=["admin"])
