"""FastAPI application with lifespan management."""

from __future__ import annotations

import importlib.metadata
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI

from izi_lab.api.middleware.error_handler import register_error_handlers
from izi_lab.api.routes import health, sessions
from izi_lab.core.config import APIConfig, AppSettings
from izi_lab.hooks import setup_logging
from izi_lab.prompts import configure_from_path
from izi_lab.services.analysis_service import AnalysisService
from izi_lab.session.store import SessionStore


def _get_version() -> str:
    """Read package version from installed metadata, with dev fallback."""
    try:
        return importlib.metadata.version("izi-lab")
    except importlib.metadata.PackageNotFoundError:
        return "0.0.0-dev"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application startup/shutdown lifecycle.

    The LLM credential is not checked here; a missing key surfaces on the
    first analysis request.
    """
    settings = AppSettings()
    setup_logging(settings.observability)
    configure_from_path(settings.prompts.overrides_path)

    app.state.settings = settings
    app.state.sessions = SessionStore()
    app.state.analysis = AnalysisService(settings)
    yield


def create_app(lifespan_handler=lifespan) -> FastAPI:
    """Build the application; tests pass their own lifespan to inject fakes."""
    api_config = APIConfig()
    application = FastAPI(
        title=api_config.title,
        description=api_config.description,
        version=_get_version(),
        lifespan=lifespan_handler,
    )
    application.include_router(health.router)
    application.include_router(sessions.router, prefix="/api")
    register_error_handlers(application)
    return application


app = create_app()
