"""Global error handlers: JSON error bodies for every failure."""

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from codesync.errors import CodeSyncError, PersistenceError, UnknownPlatformError

logger = structlog.get_logger()

# Status and public detail per service error; None keeps the exception message.
ERROR_RESPONSES: dict[type[CodeSyncError], tuple[int, str | None]] = {
    UnknownPlatformError: (404, None),
    PersistenceError: (503, "Score storage unavailable"),
}
_DEFAULT_RESPONSE = (500, "Internal server error")


def error_response(exc: CodeSyncError) -> tuple[int, str]:
    """Status code and detail for ``exc``, matched on its nearest listed class."""
    for cls in type(exc).__mro__:
        if cls in ERROR_RESPONSES:
            status_code, detail = ERROR_RESPONSES[cls]
            return status_code, detail or str(exc)
    return _DEFAULT_RESPONSE


def setup_error_handlers(app: FastAPI) -> None:
    """Register global exception handlers."""

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(_request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(_request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(status_code=422, content={"detail": "Validation error", "errors": exc.errors()})

    @app.exception_handler(CodeSyncError)
    async def codesync_error_handler(request: Request, exc: CodeSyncError) -> JSONResponse:
        status_code, detail = error_response(exc)
        # 5xx means the store failed; 4xx is a caller mistake.
        log = logger.error if status_code >= 500 else logger.info
        log("request_failed", path=request.url.path, status=status_code, error_type=type(exc).__name__, error=str(exc))
        return JSONResponse(status_code=status_code, content={"detail": detail})

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Catch-all for unhandled exceptions: always return JSON."""
        logger.error(
            "unhandled_exception",
            path=request.url.path,
            method=request.method,
            error=str(exc),
            exc_info=exc,
        )
        return JSONResponse(status_code=500, content={"detail": "Internal server error"})
