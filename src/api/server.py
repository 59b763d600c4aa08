"""FastAPI application wiring for the seedshotter control plane."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI

from api.routes import get_session_router, get_settings_router
from services import SeedshotService


def create_app(seedshot_service: Optional[SeedshotService] = None) -> FastAPI:
    """Instantiate the FastAPI application."""

    service = seedshot_service or SeedshotService()

    @asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        yield
        # Stop any session still running when the server exits.
        service.stop(wait=True, timeout=5.0)

    app = FastAPI(
        title="Seedshotter API",
        version="0.1.0",
        description=(
            "HTTP interface for starting, stopping and inspecting the log-triggered screenshotter."
        ),
        lifespan=lifespan,
    )

    app.state.seedshot_service = service
    app.include_router(get_session_router(service), prefix="/api")
    app.include_router(get_settings_router(service), prefix="/api")

    @app.get("/healthz", tags=["system"], summary="Liveness probe")
    def healthcheck() -> dict[str, str]:
        return {"status": "ok"}

    return app


app = create_app()
