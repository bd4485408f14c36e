"""Shared error types and HTTP-edge exception handlers.

Feature errors subclass ``AppError`` and carry a machine-readable ``code``
that each feature's ``dependencies.py`` maps to an HTTP status.
Cassandra driver failures are translated once, at the store boundary,
into ``StoreUnavailableError``.
"""

from collections.abc import Iterator
from contextlib import contextmanager

import structlog
from cassandra import DriverException, RequestExecutionException
from cassandra.cluster import NoHostAvailable
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import ORJSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from learnhub.core.context import get_request_id


logger = structlog.get_logger(__name__)

# OperationTimedOut is a DriverException subclass
STORE_EXCEPTIONS: tuple[type[Exception], ...] = (
    DriverException,
    RequestExecutionException,
    NoHostAvailable,
    ConnectionError,
)


class AppError(Exception):
    """Base application error."""

    def __init__(self, message: str, code: str = "app_error"):
        self.message = message
        self.code = code
        super().__init__(message)


class StoreUnavailableError(AppError):
    """The data store could not complete a read or write. Safe to retry."""

    def __init__(self, message: str = "Data store unavailable, please retry"):
        super().__init__(message, "store_unavailable")


@contextmanager
def store_errors(operation: str) -> Iterator[None]:
    """Translate driver failures raised inside the block.

    Usage:
        with store_errors("find_enrollment"):
            result = await self.session.aexecute(stmt, params)
    """
    try:
        yield
    except STORE_EXCEPTIONS as e:
        logger.error(
            "store_call_failed",
            operation=operation,
            error_type=type(e).__name__,
            error=str(e),
        )
        raise StoreUnavailableError from e


def _request_id(request: Request) -> str | None:
    return getattr(request.state, "request_id", None) or get_request_id() or None


def register_error_handlers(app: FastAPI) -> None:
    """Register global exception handlers. Stack traces are never returned."""

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> ORJSONResponse:
        logger.warning(
            "http_exception",
            status_code=exc.status_code,
            detail=str(exc.detail),
            path=request.url.path,
            method=request.method,
        )
        return ORJSONResponse(
            status_code=exc.status_code,
            content={
                "error": True,
                "message": str(exc.detail)
                if exc.status_code < status.HTTP_500_INTERNAL_SERVER_ERROR
                or exc.status_code == status.HTTP_503_SERVICE_UNAVAILABLE
                else "Internal server error",
                "status_code": exc.status_code,
                "request_id": _request_id(request),
            },
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> ORJSONResponse:
        logger.warning(
            "validation_error",
            errors=exc.errors(),
            path=request.url.path,
            method=request.method,
        )
        return ORJSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={
                "error": True,
                "message": "Validation error",
                "status_code": status.HTTP_422_UNPROCESSABLE_ENTITY,
                "request_id": _request_id(request),
                "details": [
                    {
                        "field": ".".join(str(loc) for loc in err.get("loc", [])),
                        "message": err.get("msg", "Invalid value"),
                    }
                    for err in exc.errors()
                ],
            },
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(
        request: Request, exc: Exception
    ) -> ORJSONResponse:
        logger.exception(
            "unhandled_exception",
            error_type=type(exc).__name__,
            error_message=str(exc),
            path=request.url.path,
            method=request.method,
        )
        return ORJSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": True,
                "message": "An unexpected error occurred. Please try again later.",
                "status_code": status.HTTP_500_INTERNAL_SERVER_ERROR,
                "request_id": _request_id(request),
            },
        )
