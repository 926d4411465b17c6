"""
Request ID middleware.

Every request gets an id (client-supplied ``X-Request-ID`` or a fresh UUID)
that is echoed back in the response and attached to every log record
emitted while the request is being handled.
"""

import uuid
import logging
from contextvars import ContextVar
from typing import Optional
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response


request_id_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)


class RequestIDLogFilter(logging.Filter):
    """Copies the current request id onto each log record."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "request_id"):
            record.request_id = request_id_var.get() or "-"
        return True


class RequestIDMiddleware(BaseHTTPMiddleware):

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())

        request.state.request_id = request_id
        token = request_id_var.set(request_id)

        try:
            response: Response = await call_next(request)
            response.headers["X-Request-ID"] = request_id
            return response
        finally:
            request_id_var.reset(token)


def get_request_id(request: Request) -> str:
    """
    Return the id assigned to ``request``, or "no-request-id" outside the middleware.
    """
    return getattr(request.state, "request_id", "no-request-id")
