"""
Main entrypoint for the Address Book API.

This module assembles the FastAPI application, sets up logging,
registers error handlers and includes versioned routers.  The
``create_app`` function builds and configures the app, which is then
instantiated at module import time as ``app``.  Run it with uvicorn or
another ASGI server, e.g.::

    uvicorn address_book_api.app.main:app --reload

The application title and version are provided via ``Settings`` from
``core.config``.
"""

import logging
import sqlite3

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from .api.v1.router import router as v1_router
from .core.config import settings
from .core.db import init_db
from .core.exceptions import AddressBookError, ValidationError
from .core.logging_config import setup_logging


logger = logging.getLogger(__name__)


async def address_book_error_handler(request: Request, exc: AddressBookError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def request_validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report malformed bodies, path and query parameters as HTTP 400."""
    problems = []
    for err in exc.errors():
        # Drop the leading "body"/"path"/"query" marker from the location.
        location = ".".join(str(part) for part in err.get("loc", ())[1:]) or "body"
        problems.append(f"{location}: {err.get('msg')}")
    error = ValidationError("; ".join(problems))
    return JSONResponse(status_code=error.status_code, content=error.to_dict())


async def database_error_handler(request: Request, exc: sqlite3.Error) -> JSONResponse:
    logger.exception("Database error while handling %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"code": "INTERNAL_ERROR", "message": "Internal server error"},
    )


def create_app() -> FastAPI:
    """Create and configure a FastAPI application.

    This function performs one‑time setup tasks such as configuring
    logging, registering exception handlers and including versioned
    API routers.

    Returns
    -------
    FastAPI
        A configured FastAPI application instance.
    """
    # Initialise logging before anything else so that startup code can
    # safely log messages.
    setup_logging()

    app = FastAPI(title=settings.project_name, version=settings.api_version, debug=settings.debug)

    app.add_exception_handler(AddressBookError, address_book_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)
    app.add_exception_handler(sqlite3.Error, database_error_handler)

    app.include_router(v1_router, prefix=settings.api_prefix)

    @app.get("/health", tags=["health"])
    async def health() -> dict:
        return {"status": "ok"}

    @app.on_event("startup")
    async def startup_event() -> None:
        # Creates the database file if needed and applies migrations.
        init_db()
        logger.info("Address Book API started; database at %s", settings.database_url)

    return app


# Create the application instance at import time so that tools such as
# uvicorn can discover it without calling create_app manually.
app = create_app()
