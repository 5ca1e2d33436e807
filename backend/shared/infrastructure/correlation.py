"""
Correlation ids.

Every log record carries the id of the unit of work that produced it: the
HTTP request serving a public menu, or the provisioning run started by the
CLI. Ids come from the X-Request-ID header when the caller sends a sane one.
"""

import re
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Callable, Iterator

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

request_id_var: ContextVar[str] = ContextVar("request_id", default="")

# Incoming ids are echoed in headers and logs: keep them short and printable
_VALID_ID = re.compile(r"^[A-Za-z0-9._:-]{1,64}$")


def get_request_id() -> str:
    """Get the current correlation id ("" outside any scope)."""
    return request_id_var.get()


def new_correlation_id(prefix: str = "req") -> str:
    return f"{prefix}-{uuid.uuid4().hex[:12]}"


@contextmanager
def correlation_scope(correlation_id: str | None = None, prefix: str = "run") -> Iterator[str]:
    """
    Bind a correlation id for the duration of the block.

    Nested scopes keep the outer id, so a provisioning run started from a
    request logs under the request's id.
    """
    current = request_id_var.get()
    if current and correlation_id is None:
        yield current
        return

    token = request_id_var.set(correlation_id or new_correlation_id(prefix))
    try:
        yield request_id_var.get()
    finally:
        request_id_var.reset(token)


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    """
    Binds a correlation id to each request.

    - Reuses a well-formed X-Request-ID header
    - Otherwise generates a new id
    - Returns the id in the response headers
    """

    HEADER_NAME = "X-Request-ID"

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        incoming = request.headers.get(self.HEADER_NAME, "")
        request_id = incoming if _VALID_ID.match(incoming) else None

        with correlation_scope(request_id, prefix="req") as bound:
            request.state.request_id = bound
            response = await call_next(request)
            response.headers[self.HEADER_NAME] = bound
            return response


class CorrelationIdFilter:
    """Logging filter that stamps request_id on every record."""

    def filter(self, record) -> bool:
        record.request_id = request_id_var.get() or "-"
        return True
