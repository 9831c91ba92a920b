"""
Request-scoped context: request id and caller identity.

Both live in contextvars so every log record emitted while handling a
request can carry them.
"""

import contextvars
import uuid

_request_id_var: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "request_id", default=None
)
_user_id_var: contextvars.ContextVar[str | None] = contextvars.ContextVar("user_id", default=None)


def get_request_id() -> str | None:
    return _request_id_var.get()


def set_request_id(request_id: str) -> contextvars.Token:
    """Set the request ID in context. Returns token for reset."""
    return _request_id_var.set(request_id)


def get_user_id() -> str | None:
    return _user_id_var.get()


def bind_user_id(user_id: str | None) -> contextvars.Token:
    """Attach the caller's identity to the current context."""
    return _user_id_var.set(user_id)


def generate_request_id() -> str:
    return f"req-{uuid.uuid4().hex[:16]}"


class RequestContext:
    """
    Context manager for request-scoped operations.

    Usage:
        with RequestContext() as ctx:
            logger.info("Processing")  # record carries ctx.request_id

        with RequestContext(request_id="req-abc123", user_id="u-1"):
            ...
    """

    def __init__(self, request_id: str | None = None, user_id: str | None = None):
        self.request_id = request_id or generate_request_id()
        self.user_id = user_id
        self._tokens: list[tuple[contextvars.ContextVar, contextvars.Token]] = []

    def __enter__(self) -> "RequestContext":
        self._tokens.append((_request_id_var, set_request_id(self.request_id)))
        if self.user_id is not None:
            self._tokens.append((_user_id_var, bind_user_id(self.user_id)))
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        while self._tokens:
            var, token = self._tokens.pop()
            var.reset(token)
