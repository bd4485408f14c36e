"""Request context management using contextvars.

Every request gets a request ID, and optionally the authenticated user and
a distributed trace ID. Log processors read them from here so services do
not have to pass them around.
"""

from contextvars import ContextVar, Token
from typing import Any
from uuid import UUID, uuid4


request_id_var: ContextVar[str] = ContextVar("request_id", default="")
user_id_var: ContextVar[str | None] = ContextVar("user_id", default=None)
trace_id_var: ContextVar[str | None] = ContextVar("trace_id", default=None)

_CONTEXT_VARS: dict[str, ContextVar[Any]] = {
    "request_id": request_id_var,
    "user_id": user_id_var,
    "trace_id": trace_id_var,
}


def generate_request_id() -> str:
    """Generate a new unique request ID."""
    return str(uuid4())


def get_request_id() -> str:
    """Get the current request ID."""
    return request_id_var.get()


def set_request_id(request_id: str | None = None) -> str:
    """Set the request ID for the current context.

    Args:
        request_id: Incoming ID (e.g. from ``X-Request-ID``). Generated if empty.

    Returns:
        The request ID that was set.
    """
    rid = request_id or generate_request_id()
    request_id_var.set(rid)
    return rid


def get_user_id() -> str | None:
    """Get the current user ID."""
    return user_id_var.get()


def set_user_id(user_id: str | UUID | None) -> None:
    """Set the authenticated user for the current context."""
    user_id_var.set(str(user_id) if user_id is not None else None)


def get_trace_id() -> str | None:
    """Get the current trace ID."""
    return trace_id_var.get()


def set_trace_id(trace_id: str | None) -> None:
    """Set the trace ID from distributed tracing headers."""
    trace_id_var.set(trace_id)


def get_context() -> dict[str, Any]:
    """Return the non-empty context values as a dictionary."""
    return {name: var.get() for name, var in _CONTEXT_VARS.items() if var.get()}


def clear_context() -> None:
    """Reset all context variables (end of request)."""
    request_id_var.set("")
    user_id_var.set(None)
    trace_id_var.set(None)


class RequestContext:
    """Context manager that scopes context values to a block.

    Useful outside HTTP requests (scripts, background jobs):

        with RequestContext(user_id=student_id):
            await tracker.mark_lesson_complete(...)
    """

    def __init__(
        self,
        request_id: str | None = None,
        user_id: str | UUID | None = None,
        trace_id: str | None = None,
    ) -> None:
        self.request_id = request_id or generate_request_id()
        self.user_id = str(user_id) if user_id is not None else None
        self.trace_id = trace_id
        self._tokens: list[tuple[ContextVar[Any], Token[Any]]] = []

    def __enter__(self) -> "RequestContext":
        values = {
            "request_id": self.request_id,
            "user_id": self.user_id,
            "trace_id": self.trace_id,
        }
        for name, value in values.items():
            if value is not None:
                var = _CONTEXT_VARS[name]
                self._tokens.append((var, var.set(value)))
        return self

    def __exit__(self, *_: object) -> None:
        for var, token in reversed(self._tokens):
            var.reset(token)
        self._tokens.clear()
