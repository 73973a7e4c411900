"""
Main entrypoint for the Meetup API.

This module assembles the FastAPI application, sets up logging, maps
domain exceptions to HTTP responses and includes versioned routers.
``create_app`` builds and configures the app, which is then
instantiated at module import time as ``app``::

    uvicorn meetup_api.app.main:app --reload
"""

import logging
import sqlite3

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from .api.v1.router import router as v1_router
from .core.config import settings
from .core.db import init_db
from .core.errors import AuthorizationError, MeetupError, ValidationError
from .core.logging_config import setup_logging

logger = logging.getLogger(__name__)


async def meetup_error_handler(request: Request, exc: MeetupError) -> JSONResponse:
    """Render a domain exception as ``{"detail": ..., "errors": {...}}``."""
    content: dict = {"detail": exc.detail}
    if isinstance(exc, ValidationError):
        content["errors"] = exc.errors
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, AuthorizationError) else None
    return JSONResponse(status_code=exc.status_code, content=content, headers=headers)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Fold pydantic errors into the same per-field map services produce.

    Each error is keyed by the last named part of its location (``type``,
    ``limit``, ``sortBy``).  The first message per field is kept.
    """
    errors = {}
    for error in exc.errors():
        names = [part for part in error["loc"] if isinstance(part, str)]
        errors.setdefault(names[-1] if names else "body", error["msg"])
    return await meetup_error_handler(request, ValidationError(errors))


async def database_error_handler(request: Request, exc: sqlite3.Error) -> JSONResponse:
    logger.error(
        "Database error on %s %s: %s", request.method, request.url.path, exc, exc_info=exc
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )


def create_app() -> FastAPI:
    """Create and configure a FastAPI application.

    Returns
    -------
    FastAPI
        A configured FastAPI application instance.
    """
    # Logging first so that everything below can log.
    setup_logging(settings.log_level, settings.log_file or None)

    app = FastAPI(title=settings.project_name, version=settings.api_version, debug=settings.debug)

    app.add_exception_handler(MeetupError, meetup_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(sqlite3.Error, database_error_handler)

    app.include_router(v1_router, prefix="/api/v1")

    @app.get("/health", tags=["health"])
    async def health() -> dict:
        return {"status": "ok", "version": settings.api_version}

    @app.on_event("startup")
    async def startup_event() -> None:
        # Creates the database file on first start and applies migrations.
        init_db()

    return app


app = create_app()
