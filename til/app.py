"""
FastAPI application entry point.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from til.config import get_settings
from til.db import DataStoreError
from til.routes import router
from til.views import router as views_router

logger = logging.getLogger(__name__)


async def data_store_error_handler(request: Request, exc: DataStoreError):
    logger.error("Fact store request failed on %s: %s", request.url.path, exc)
    return JSONResponse(
        status_code=502,
        content={"detail": "The fact store is unavailable. Please try again."},
    )


def create_app() -> FastAPI:
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    app = FastAPI(title=settings.app_title, version="0.1.0")
    app.add_exception_handler(DataStoreError, data_store_error_handler)
    app.include_router(router, prefix=settings.api_prefix)
    app.include_router(views_router)
    return app


app = create_app()
