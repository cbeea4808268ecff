from __future__ import annotations

import asyncio
import logging
from contextlib import suppress

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from wordguess.api.routes import router
from wordguess.event_store import run_sweeper
from wordguess.settings import log_level_from_env, relay_settings_from_env

APP_NAME = "wordguess-relay"
APP_VERSION = "0.1.0"

app = FastAPI(title=APP_NAME, version=APP_VERSION)
# Producers are chat bots / overlays on arbitrary origins.
app.add_middleware(CORSMiddleware, allow_origins=["*"], allow_methods=["*"], allow_headers=["*"])
app.include_router(router)
# Configure logging
logging.basicConfig(level=log_level_from_env())
logger = logging.getLogger(__name__)


@app.on_event("startup")
async def _startup() -> None:
    settings = relay_settings_from_env()
    app.state.sweeper = None
    if settings.sweep_interval_s > 0:
        app.state.sweeper = asyncio.create_task(
            run_sweeper(interval_s=settings.sweep_interval_s, ttl_ms=settings.ttl_ms)
        )
        logger.info("TTL sweeper started interval=%ss ttl=%sms", settings.sweep_interval_s, settings.ttl_ms)


@app.on_event("shutdown")
async def _shutdown() -> None:
    task: asyncio.Task[None] | None = getattr(app.state, "sweeper", None)
    if task is None:
        return
    task.cancel()
    with suppress(asyncio.CancelledError):
        await task


@app.get("/info")
async def info() -> dict[str, str]:
    return {"name": APP_NAME, "version": APP_VERSION}
