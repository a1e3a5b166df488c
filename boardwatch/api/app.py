"""FastAPI application factory."""

from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .routes import webhooks_router, monitor_router
from ..container import configure_from_settings, get_container

logger = logging.getLogger(__name__)


def create_app(
    title: str = "BoardWatch API",
    version: str = "1.0.0",
    cors_origins: list[str] | None = None,
    start_scheduler: Optional[bool] = None,
) -> FastAPI:
    """Create FastAPI application.

    Args:
        title: API title
        version: API version
        cors_origins: Allowed CORS origins
        start_scheduler: Run the periodic sweeps while the app is up
            (defaults to SCHEDULER_ENABLED)

    Returns:
        FastAPI application instance
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Application lifespan manager."""
        container = configure_from_settings(get_container())
        enabled = start_scheduler
        if enabled is None:
            enabled = container.settings.scheduler.enabled

        scheduler = container.scheduler if enabled else None
        if scheduler:
            scheduler.start()
        try:
            yield
        finally:
            if scheduler:
                scheduler.stop()

    app = FastAPI(
        title=title,
        version=version,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # Add CORS middleware
    if cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    # Include routers
    app.include_router(webhooks_router)
    app.include_router(monitor_router)

    @app.get("/health")
    async def health_check() -> dict:
        """Health check endpoint."""
        return {"status": "healthy", "version": version}

    return app


# Create default app instance
app = create_app()
