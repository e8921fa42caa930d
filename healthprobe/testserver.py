"""
Three-endpoint HTTP server for trying the probe by hand and for the
integration tests:

    /healthz   200
    /healthz2  301 (no Location header)
    /healthz3  200 after `slow_delay_s` seconds
"""
from __future__ import annotations

import asyncio
import logging

import uvicorn
from fastapi import FastAPI
from fastapi.responses import PlainTextResponse

logger = logging.getLogger(__name__)

BODY = "healthy"


def build_app(slow_delay_s: float = 3.0) -> FastAPI:
    app = FastAPI(
        title="Health Probe Fixture",
        version="1.0.0",
        description="Endpoints returning 200, 301 and a delayed 200.",
    )

    @app.get("/healthz", response_class=PlainTextResponse, tags=["fixture"])
    def healthz():
        return PlainTextResponse(BODY, status_code=200)

    @app.get("/healthz2", response_class=PlainTextResponse, tags=["fixture"])
    def healthz2():
        return PlainTextResponse(BODY, status_code=301)

    @app.get("/healthz3", response_class=PlainTextResponse, tags=["fixture"])
    async def healthz3():
        await asyncio.sleep(slow_delay_s)
        return PlainTextResponse(BODY, status_code=200)

    return app


def serve(host: str = "0.0.0.0", port: int = 8080, slow_delay_s: float = 3.0) -> None:
    logger.info("Starting server on port %s ...", port)
    uvicorn.run(build_app(slow_delay_s), host=host, port=port, log_level="warning")
