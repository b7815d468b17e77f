"""FastAPI application factory for the landing page API."""

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware

from .. import __version__
from ..errors import StorageError
from ..storage.database import PageDatabase
from .config import settings
from .routes.health import router as health_router
from .routes.public import router as public_router
from .routes.pages import router as pages_router
from .routes.leads import router as leads_router
from .routes.dashboard import router as dashboard_router

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    logger.info("Starting Leadpage Engine API (database: %s)", app.state.store.db_path)
    if app.state.atomic_counters:
        logger.info("Atomic page counters enabled")
    yield
    logger.info("Leadpage Engine API shutting down")


def create_app(store: Optional[PageDatabase] = None) -> FastAPI:
    """Create and configure the FastAPI application.

    ``store`` defaults to the database at LP_DATABASE_PATH.
    """
    app = FastAPI(
        title="Leadpage Engine API",
        description="Landing pages, lead capture and lead CRM",
        version=__version__,
        lifespan=lifespan,
    )

    app.state.store = store or PageDatabase(Path(settings.db_path))
    app.state.atomic_counters = settings.atomic_counters

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )

    @app.exception_handler(StorageError)
    async def storage_error_handler(request: Request, exc: StorageError):
        logger.exception("Storage error on %s %s", request.method, request.url.path, exc_info=exc)
        return JSONResponse(
            status_code=500,
            content={"detail": {"success": False, "error": "server_error", "detail": "Storage unavailable"}},
        )

    # Routes
    app.include_router(health_router)
    app.include_router(public_router)
    app.include_router(pages_router)
    app.include_router(leads_router)
    app.include_router(dashboard_router)

    return app
