"""FastAPI application factory."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from project_pulse.interface.dependencies import shutdown, startup
from project_pulse.interface.error_handlers import register_error_handlers
from project_pulse.interface.routes import router


@asynccontextmanager
async def _lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage startup / shutdown of shared resources."""
    await startup()
    yield
    await shutdown()


def create_app() -> FastAPI:
    """Build and wire the FastAPI application."""
    app = FastAPI(
        title="Project Pulse",
        version="1.0.0",
        description=(
            "Takes a public GitHub repository URL and returns a snapshot of "
            "its health: recent commits, branches and their staleness, open "
            "pull requests and issues, and contributor activity."
        ),
        lifespan=_lifespan,
    )

    register_error_handlers(app)
    app.include_router(router)

    return app
