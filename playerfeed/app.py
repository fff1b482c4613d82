"""
FastAPI application entry point for the player feed backend.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from playerfeed.config import get_settings
from playerfeed.errors import PlayerFeedError
from playerfeed.routes import router

logger = logging.getLogger(__name__)


async def handle_playerfeed_error(request: Request, exc: PlayerFeedError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.detail)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


def create_app() -> FastAPI:
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s [%(levelname)s] %(name)s - %(message)s",
    )
    app = FastAPI(title="Player Feed Backend (FastAPI)", version="0.1.0")
    app.include_router(router, prefix=settings.api_prefix)
    app.add_exception_handler(PlayerFeedError, handle_playerfeed_error)
    return app


app = create_app()
