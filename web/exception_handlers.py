"""Exception handlers rendering errors as ``{success: false, error}``."""

from typing import Any, Dict

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from loguru import logger
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException

from hkapi.core.exceptions import HKApiError


def _error_body(message: str, **extra: Any) -> Dict[str, Any]:
    return {"success": False, "error": message, **extra}


async def hk_api_error_handler(request: Request, exc: HKApiError) -> JSONResponse:
    """Render application errors with their own status code."""
    if exc.http_status >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.__class__.__name__}: {exc.message}")
    else:
        logger.info(f"{request.method} {request.url.path} rejected: {exc.message}")
    return JSONResponse(status_code=exc.http_status, content=_error_body(exc.message))


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Render HTTPException (404 routes, 405 methods) in the common shape."""
    detail = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
    headers = getattr(exc, "headers", None) or {}
    return JSONResponse(status_code=exc.status_code, content=_error_body(detail), headers=headers)


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Convert Pydantic validation errors to a field -> message map."""
    errors = {}
    for error in exc.errors():
        field = ".".join(str(loc) for loc in error["loc"] if loc != "body")
        errors[field] = error["msg"]

    return JSONResponse(
        status_code=422,
        content=_error_body("Request validation failed", errors=errors),
    )


async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    logger.warning(f"Rate limit exceeded on {request.url.path}: {exc.detail}")
    return JSONResponse(
        status_code=429, content=_error_body(f"Rate limit exceeded: {exc.detail}")
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last resort: log the traceback, never leak it."""
    logger.opt(exception=exc).error(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(status_code=500, content=_error_body("Internal server error"))
