"""
DrugBot Backend API

FastAPI server exposing the drug database: dynamic table access, generic and
manufactured drug entities, saved reports, select lists, spreadsheet upload
and the Excel export.

Run with:
    uvicorn drugbot.api.main:app --reload
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from drugbot import __version__
from drugbot.api.errors import setup_exception_handlers
from drugbot.api.routes import dynamic, entities, export, reports, select_lists, upload
from drugbot.api.schemas import HealthResponse
from drugbot.utils.config import get_settings
from drugbot.utils.logging import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    settings = get_settings()
    setup_logging()
    if not settings.has_database:
        logger.warning("No database URL configured; data endpoints will fail")
    logger.info("DrugBot API starting up...")
    yield
    logger.info("DrugBot API shutting down...")


def create_app() -> FastAPI:
    settings = get_settings()

    app = FastAPI(
        title="DrugBot API",
        description="Drug database, reports and export backend",
        version=__version__,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    setup_exception_handlers(app)

    @app.get("/health", response_model=HealthResponse)
    async def health_check():
        """Health check endpoint."""
        return HealthResponse(status="healthy", version=__version__, database_configured=settings.has_database)

    app.include_router(dynamic.router, prefix="/api", tags=["dynamic"])
    app.include_router(entities.router, prefix="/api", tags=["entities"])
    app.include_router(reports.router, prefix="/api", tags=["reports"])
    app.include_router(select_lists.router, prefix="/api", tags=["select-lists"])
    app.include_router(export.router, prefix="/api", tags=["export"])
    app.include_router(upload.router, prefix="/api", tags=["upload"])

    return app


app = create_app()
