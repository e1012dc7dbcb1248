"""Rate limiting for the grid endpoints using slowapi.

Storage is per process memory. The ``limiter`` lives in its own module so both
``main`` and ``api`` can import it.
"""

from fastapi import Request
from fastapi.responses import JSONResponse
from loguru import logger
from slowapi import Limiter
from slowapi.util import get_remote_address

from extragrid.config import get_settings

limiter = Limiter(key_func=get_remote_address)


def grid_rate_limit() -> str:
    """The configured limit, read per request so tests can override settings."""
    return get_settings().rate_limit


def rate_limit_exceeded_handler(request: Request, _exc: Exception) -> JSONResponse:
    logger.warning(
        "Rate limit exceeded",
        extra={"path": request.url.path, "client": get_remote_address(request)},
    )
    return JSONResponse(
        status_code=429,
        content={"detail": "Rate limit exceeded. Please try again later."},
    )
