"""FastAPI application exposing the fog-of-war pipeline to a renderer client."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from hexfog import __version__
from hexfog.api import routes
from hexfog.api.runtime import ApiState, build_state
from hexfog.config import Settings, get_settings

logger = logging.getLogger(__name__)


def create_app(
    *,
    state_factory: Callable[[], ApiState] = build_state,
    settings: Settings | None = None,
) -> FastAPI:
    """Build the app.

    ``state_factory`` runs once per lifespan, so every test client gets a fresh
    in-memory map store. ``settings`` only feeds the CORS policy here; the
    state carries its own copy for layout and viewer configuration.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        state = state_factory()
        app.state.api_state = state
        logger.info(
            "hexfog API ready (hex_size=%s, local_player=%s)",
            state.settings.hex_size,
            state.settings.local_player,
        )
        try:
            yield
        finally:
            await state.shutdown()
            logger.info("hexfog API stopped with %d live maps", len(state.maps.list_sessions()))

    app = FastAPI(
        title="hexfog API",
        description="Hex map sessions with per-player fog of war and click routing",
        version=__version__,
        lifespan=lifespan,
    )
    cors_origins = (settings or get_settings()).cors_origins
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["*"],
    )
    app.include_router(routes.router)
    return app


app = create_app()
