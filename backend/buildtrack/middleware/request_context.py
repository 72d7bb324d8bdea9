"""
Request context middleware.

WHAT: Middleware that assigns every request an ID, records who is calling,
and logs one line per request with its outcome and duration.

WHY: Estimate changes are driven by whoever sends the request. Keeping the
request ID and caller identity in a context variable lets log records and
services pick them up without threading the request object everywhere.

HOW: Stores a RequestContext both on ``request.state`` and in a ContextVar
for the duration of the request.
"""

import logging
import time
import uuid
from contextvars import ContextVar
from dataclasses import dataclass
from typing import Optional, Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response


logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"
USER_ID_HEADER = "X-User-Id"


@dataclass(frozen=True)
class RequestContext:
    """
    Container for request-scoped context data.

    Fields:
    - request_id: Unique identifier for the request (for log correlation)
    - user_id: Caller identity from the X-User-Id header, if any
    - path: Request path
    - method: HTTP method
    """

    request_id: str
    user_id: Optional[str]
    path: str
    method: str


_request_context: ContextVar[Optional[RequestContext]] = ContextVar(
    "request_context", default=None
)


def get_request_context() -> Optional[RequestContext]:
    """
    Get the current request context.

    Returns:
        RequestContext if within a request, None otherwise
    """
    return _request_context.get()


def get_request_id(request: Request) -> str:
    """
    Reuse the caller's request ID when one is supplied.

    WHY: A frontend or proxy that already tagged the request should see the
    same ID in our logs and response headers.
    """
    incoming = request.headers.get(REQUEST_ID_HEADER)
    if incoming and incoming.strip():
        return incoming.strip()[:64]
    return str(uuid.uuid4())


def get_user_id(request: Request) -> Optional[str]:
    """Extract the caller identity header, ignoring blank values."""
    user_id = request.headers.get(USER_ID_HEADER)
    if user_id and user_id.strip():
        return user_id.strip()[:64]
    return None


class RequestContextMiddleware(BaseHTTPMiddleware):
    """
    Middleware that captures request context and logs request outcomes.

    Example:
        @router.get("/example")
        async def example(request: Request):
            ctx = request.state.context
            # or
            ctx = get_request_context()
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """
        Process request and add context.

        Args:
            request: Incoming request
            call_next: Next middleware/handler

        Returns:
            Response with request ID header added
        """
        context = RequestContext(
            request_id=get_request_id(request),
            user_id=get_user_id(request),
            path=request.url.path,
            method=request.method,
        )
        request.state.context = context
        token = _request_context.set(context)
        started = time.perf_counter()

        try:
            response = await call_next(request)
            response.headers[REQUEST_ID_HEADER] = context.request_id

            elapsed_ms = (time.perf_counter() - started) * 1000
            logger.info(
                "%s %s -> %s (%.1f ms)",
                context.method,
                context.path,
                response.status_code,
                elapsed_ms,
            )
            return response

        finally:
            _request_context.reset(token)
