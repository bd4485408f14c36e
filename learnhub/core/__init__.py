# Core infrastructure
from learnhub.core.context import (
    RequestContext,
    clear_context,
    get_context,
    get_request_id,
    get_trace_id,
    get_user_id,
    set_request_id,
    set_trace_id,
    set_user_id,
)
from learnhub.core.errors import AppError, StoreUnavailableError, store_errors
from learnhub.core.logging import configure_structlog, get_logger
from learnhub.core.middleware import RequestContextMiddleware


__all__ = [
    "AppError",
    "RequestContext",
    "RequestContextMiddleware",
    "StoreUnavailableError",
    "clear_context",
    "configure_structlog",
    "get_context",
    "get_logger",
    "get_request_id",
    "get_trace_id",
    "get_user_id",
    "set_request_id",
    "set_trace_id",
    "set_user_id",
    "store_errors",
]
