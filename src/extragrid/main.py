"""extragrid server.

Stateless viewport API over a single in-memory sheet. Every request carries its
own home, size, selection and navigations; the server keeps only the cells.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from loguru import logger
from slowapi.errors import RateLimitExceeded

from extragrid import api
from extragrid.config import get_settings
from extragrid.engine import MemorySpreadsheet, SpreadsheetEngine
from extragrid.exceptions import UnknownLabelError, ViewportError
from extragrid.logging import configure_logging
from extragrid.rate_limit import limiter, rate_limit_exceeded_handler


async def viewport_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Return the error's own message as a 400."""
    logger.info(
        "Request rejected",
        extra={"path": request.url.path, "error": type(exc).__name__, "detail": str(exc)},
    )
    return JSONResponse(status_code=400, content={"detail": str(exc)})


async def unknown_label_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.info("Label not found", extra={"path": request.url.path, "detail": str(exc)})
    return JSONResponse(status_code=404, content={"detail": str(exc)})


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Global handler for unhandled exceptions."""
    logger.exception(
        "Unhandled exception",
        extra={"path": request.url.path, "error": str(exc)},
    )
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error"},
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    settings = get_settings()

    logger.info(f"Starting extragrid server on port {settings.port}")

    # A caller supplied engine (tests, embedding) wins over the configured one
    if getattr(app.state, "engine", None) is None:
        app.state.engine = MemorySpreadsheet(
            default_column_width=settings.default_column_width,
            default_row_height=settings.default_row_height,
            frozen_columns=settings.frozen_columns,
            frozen_rows=settings.frozen_rows,
        )

    yield

    logger.info("Shutting down extragrid server")


def create_app(engine: SpreadsheetEngine | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    configure_logging(
        is_production=settings.is_production,
        log_level=settings.log_level,
    )

    app = FastAPI(
        title="extragrid",
        description="Spreadsheet viewport, navigation and window filtering API",
        version="0.1.0",
        lifespan=lifespan,
        docs_url="/api/docs" if not settings.is_production else None,
        redoc_url="/api/redoc" if not settings.is_production else None,
        openapi_url="/api/openapi.json" if not settings.is_production else None,
    )
    app.state.engine = engine

    # Exception handlers
    app.add_exception_handler(UnknownLabelError, unknown_label_handler)
    app.add_exception_handler(ViewportError, viewport_error_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)

    app.state.limiter = limiter

    app.include_router(api.router, prefix="/api")

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "extragrid.main:app",
        host="0.0.0.0",
        port=settings.port,
        reload=not settings.is_production,
    )
