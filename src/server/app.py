"""FastAPI application bootstrap."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .dependencies import get_lifecycle_manager, get_sweeper
from .routes import register_todo_routes
from .schemas import HealthResponse


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Start the background recycle bin sweeper for the lifetime of the server."""
    sweeper = get_sweeper()
    try:
        yield
    finally:
        if sweeper is not None:
            sweeper.stop()
            get_sweeper.cache_clear()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(title="Task Tracker API", version="1.0.0", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok")

    register_todo_routes(app)

    return app


app = create_app()

__all__ = ["app", "create_app", "get_lifecycle_manager"]
