"""FastAPI application entrypoint. No business logic; only wiring, middleware and error mapping."""

from dotenv import load_dotenv

load_dotenv()

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from app.api.errors import register_exception_handlers
from app.api.v1 import router as v1_router
from app.core.config import Settings, get_settings
from app.core.database import Database
from app.core.logging_config import configure_logging
from app.services.storage import COVERS_DIR, PUBLIC_PREFIX, ensure_upload_dirs

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Open the database handle on startup (unless one was injected) and dispose it on shutdown."""
    settings: Settings = app.state.settings
    owned = getattr(app.state, "database", None) is None
    if owned:
        app.state.database = Database(settings.DATABASE_URL, echo=settings.DEBUG)
    ensure_upload_dirs(settings.UPLOAD_DIR)
    logger.info("ELibrary API starting up (env=%s)", settings.APP_ENV)

    yield

    if owned:
        app.state.database.dispose()
    logger.info("ELibrary API shutdown complete")


def create_app(settings: Settings | None = None, database: Database | None = None) -> FastAPI:
    """
    Build the application.

    Tests pass their own Settings and an already-open Database; the module-level
    app uses environment settings and opens its Database in the lifespan.
    """
    settings = settings or get_settings()
    configure_logging(settings.LOG_LEVEL)

    app = FastAPI(
        title="ELibrary API",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.settings = settings
    if database is not None:
        app.state.database = database

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["Content-Type", "Authorization"],
    )
    register_exception_handlers(app)

    app.include_router(v1_router, prefix=settings.API_V1_PREFIX)

    # Only covers are public; PDFs are served by the gated download route.
    # Directories are created at startup; the mount resolves them per request.
    app.mount(
        f"{PUBLIC_PREFIX}/{COVERS_DIR}",
        StaticFiles(directory=settings.UPLOAD_DIR / COVERS_DIR, check_dir=False),
        name="covers",
    )

    @app.get("/")
    def root() -> dict[str, str]:
        """Root route; minimal payload for discovery."""
        return {"message": "Welcome to the ELibrary API"}

    return app


app = create_app()
