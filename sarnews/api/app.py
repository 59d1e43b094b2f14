"""FastAPI application exposing the refresh triggers."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from .. import __version__
from ..config import Config
from ..db import close_connection_pool
from ..exceptions import StorageError, StorageUnavailableError
from ..pipeline import RefreshOrchestrator
from .routes import router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Wait for background translation and release the pool on shutdown."""
    logger.info("Starting sarnews API")
    yield

    orchestrator: RefreshOrchestrator = app.state.orchestrator
    await orchestrator.wait_for_background()
    if orchestrator.backfill is not None:
        await orchestrator.backfill.translator.aclose()
    close_connection_pool()
    logger.info("Shut down sarnews API")


def create_app(config: Optional[Config] = None, orchestrator: Optional[RefreshOrchestrator] = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    config = config or Config()
    orchestrator = orchestrator or RefreshOrchestrator.from_config(config)

    app = FastAPI(
        title="Sarawak News",
        description="Regional news ingestion and refresh triggers",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.config = config
    app.state.orchestrator = orchestrator

    @app.exception_handler(StorageError)
    async def storage_error_handler(request: Request, exc: StorageError) -> JSONResponse:
        if orchestrator.reporter:
            orchestrator.reporter.api_error(request.url.path, exc)
        else:
            logger.error("Storage failure on %s: %s", request.url.path, exc)

        status_code = 503 if isinstance(exc, StorageUnavailableError) else 500
        return JSONResponse(status_code=status_code, content={"success": False, "error": str(exc)})

    app.include_router(router)

    @app.get("/health")
    async def health_check() -> Dict[str, str]:
        """Health check endpoint."""
        return {"status": "healthy", "app": "sarnews"}

    return app
