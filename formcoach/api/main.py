"""FastAPI application exposing REST endpoints for the coaching engine.

Endpoints:
- /session/*: workout session lifecycle, history (JSON)
- POST /posture: score one frame of detector keypoints (JSON)
- GET /stats: totals, streaks, achievements and chart series (JSON)
- /catalog/*, /profile: exercise catalog and user profile (JSON)

This module wires sub-routers from domain modules and provides a health check.
"""
from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger

from formcoach.api.routers.catalog import router as catalog_router
from formcoach.api.routers.posture import router as posture_router
from formcoach.api.routers.profile import router as profile_router
from formcoach.api.routers.session import clock, engine
from formcoach.api.routers.session import router as session_router
from formcoach.api.routers.stats import router as stats_router
from formcoach.api.schemas import Envelope
from formcoach.core.config import get_settings
from formcoach.core.db import DATA_DIR, init_db
from formcoach.core.errors import ConfigurationError
from formcoach.core.logging_config import add_file_sink

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: ensure DB tables exist
    init_db()
    # Configure file logging
    sink_id = add_file_sink(DATA_DIR / "logs")
    stop_event = asyncio.Event()
    if settings.clock_enabled:
        app.state._clock_stop = stop_event
        app.state._clock_task = asyncio.create_task(clock.run(stop_event))
        logger.info("Session clock started interval={}s", clock.interval)
    yield
    # Shutdown: stop the clock and close out any running session
    stop_event.set()
    if getattr(app.state, "_clock_task", None):
        await app.state._clock_task
        delattr(app.state, "_clock_task")
    await asyncio.to_thread(engine.stop)
    logger.remove(sink_id)


app = FastAPI(title=settings.app_name, lifespan=lifespan)
app.state.engine = engine

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.exposed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ConfigurationError)
async def configuration_error_handler(request: Request, exc: ConfigurationError) -> JSONResponse:
    logger.warning("Rejected request {}: {}", request.url.path, exc)
    body = Envelope(success=False, error=str(exc))
    return JSONResponse(status_code=422, content=body.model_dump())


@app.get("/health")
async def health() -> dict:
    """Return API health status."""

    return {"status": "ok"}


# Routers
app.include_router(session_router, prefix="", tags=["session"])
app.include_router(posture_router, prefix="", tags=["posture"])
app.include_router(stats_router, prefix="", tags=["stats"])
app.include_router(catalog_router, prefix="", tags=["catalog"])
app.include_router(profile_router, prefix="", tags=["profile"])
