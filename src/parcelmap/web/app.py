"""FastAPI application for the parcel map editor.

Exposes the current spatial model, lot editing with undo/redo, and
re-ingestion from the block layout or an uploaded feature collection.

Run with:
    uvicorn parcelmap.web.app:create_app --factory --port 8080
"""

from __future__ import annotations

import logging

import yaml
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, ValidationError

from parcelmap.core.config import Settings
from parcelmap.history.session import EditorSession
from parcelmap.ingest.generator import LayoutGenerator
from parcelmap.ingest.registry import SourceRegistry
from parcelmap.spatial.models import MapBounds
from parcelmap.web.history_router import router as history_router
from parcelmap.web.map_router import router as map_router

logger = logging.getLogger(__name__)


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    service: str
    version: str = "0.1.0"


def create_app(
    settings: Settings | None = None,
    generator: LayoutGenerator | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Uses the factory pattern so tests can create isolated app instances.

    Args:
        settings: Application settings. Defaults to Settings().
        generator: Optional pre-built generator. Defaults to one loaded from
            the configured block layout file.

    Returns:
        A configured FastAPI instance with a session loaded from the generator.
    """
    if settings is None:
        settings = Settings()
    logging.getLogger("parcelmap").setLevel(settings.log_level)

    app = FastAPI(
        title="Parcel Map Editor",
        description="Block and lot map with history-tracked editing",
        version="0.1.0",
    )

    # CORS for development
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    bounds = MapBounds.from_config(settings.bounds)
    if generator is None:
        try:
            generator = LayoutGenerator.from_layout_file(config=settings.generator, bounds=bounds)
        except FileNotFoundError as exc:
            logger.warning("Block layout not found (%s); generating landmarks only", exc)
            generator = LayoutGenerator(config=settings.generator, bounds=bounds)
        except (ValidationError, yaml.YAMLError) as exc:
            logger.warning("Block layout is invalid; generating landmarks only: %s", exc)
            generator = LayoutGenerator(config=settings.generator, bounds=bounds)

    source_registry = SourceRegistry()
    source_registry.register(generator)

    editor_session = EditorSession(config=settings.history)
    editor_session.load(generator)

    app.state.settings = settings
    app.state.map_bounds = bounds
    app.state.source_registry = source_registry
    app.state.editor_session = editor_session

    app.include_router(map_router)
    app.include_router(history_router)

    @app.get("/api/health", response_model=HealthResponse)
    async def health_check() -> HealthResponse:
        """Health check endpoint."""
        return HealthResponse(status="healthy", service="parcelmap-editor")

    return app
