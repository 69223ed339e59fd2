# bookshelf/main.py
"""
Bookshelf: a small server-rendered catalogue of books.

``create_app()`` wires the catalogue routes, the cookie session that holds
each client's search filter, the static files and the two error pages.
``app`` is the instance uvicorn serves.
"""

import logging
import time
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.sessions import SessionMiddleware

from .catalog import catalog_router
from .config import Settings, get_settings
from .errors import (
    NOT_FOUND_MESSAGE,
    SERVER_ERROR_MESSAGE,
    BookNotFoundError,
    CatalogError,
)
from .observability import setup_logging
from .storage import Database
from .views import STATIC_DIR, templates


logger = logging.getLogger(__name__)


def _page_not_found(request: Request, err):
    return templates.TemplateResponse(
        request,
        "page-not-found.html",
        {"err": err, "title": "Page Not Found"},
        status_code=status.HTTP_404_NOT_FOUND,
    )


def _server_error(request: Request, err, status_code: int):
    return templates.TemplateResponse(
        request,
        "error.html",
        {"err": err, "title": "Server Error"},
        status_code=status_code,
    )


def _log_access(request: Request, status_code: int, started: float) -> None:
    duration_ms = round((time.perf_counter() - started) * 1000, 3)
    logger.info(
        "%s %s %s %.3f ms",
        request.method,
        request.url.path,
        status_code,
        duration_ms,
        extra={
            "method": request.method,
            "path": request.url.path,
            "status_code": status_code,
            "duration_ms": duration_ms,
        },
    )


def register_error_handlers(app: FastAPI) -> None:
    """Send every failure to one of two pages: not found, or server error."""

    @app.exception_handler(CatalogError)
    async def catalog_error_handler(request: Request, exc: CatalogError):
        logger.warning("%s %s", exc.status_code, exc.message)
        if isinstance(exc, BookNotFoundError) or exc.status_code == 404:
            exc.message = exc.message or NOT_FOUND_MESSAGE
            return _page_not_found(request, exc)
        exc.message = exc.message or SERVER_ERROR_MESSAGE
        return _server_error(request, exc, exc.status_code)

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404:
            err = CatalogError(NOT_FOUND_MESSAGE, status_code=404)
            logger.warning("%s %s %s", err.status_code, request.url.path, err.message)
            return _page_not_found(request, err)
        detail = exc.detail if isinstance(exc.detail, str) else ""
        err = CatalogError(detail or SERVER_ERROR_MESSAGE, status_code=exc.status_code)
        logger.warning("%s %s", err.status_code, err.message)
        return _server_error(request, err, exc.status_code)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        err = CatalogError("The request could not be understood.", status_code=400)
        logger.warning("%s %s: %s", err.status_code, request.url.path, exc.errors())
        return _server_error(request, err, err.status_code)

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        # Internal details stay in the log, the page shows the generic message
        logger.error(
            "500 Unhandled exception on %s: %s", request.url.path, exc, exc_info=exc
        )
        err = CatalogError(SERVER_ERROR_MESSAGE)
        return _server_error(request, err, status.HTTP_500_INTERNAL_SERVER_ERROR)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        setup_logging(settings.log_level, settings.log_format)
        database = Database(settings.database_url, echo=settings.database_echo)
        database.connect()
        app.state.database = database
        logger.info("Bookshelf started")
        yield
        database.dispose()
        logger.info("Bookshelf shutting down")

    app = FastAPI(
        title="Bookshelf",
        description="Lists, searches, creates, edits and deletes books.",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.settings = settings

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        started = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            # The catch-all handler still renders the 500 page further out
            _log_access(request, status.HTTP_500_INTERNAL_SERVER_ERROR, started)
            raise
        _log_access(request, response.status_code, started)
        return response

    app.add_middleware(SessionMiddleware, secret_key=settings.secret_key)

    app.mount("/static", StaticFiles(directory=str(STATIC_DIR)), name="static")
    app.include_router(catalog_router)
    register_error_handlers(app)
    return app


app = create_app()
