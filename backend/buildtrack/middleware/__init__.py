"""
Middleware package.

WHY: Middleware provides cross-cutting concerns like request correlation
and request logging that apply to all requests.
"""

from buildtrack.middleware.request_context import (
    RequestContextMiddleware,
    RequestContext,
    get_request_context,
    get_request_id,
    get_user_id,
    REQUEST_ID_HEADER,
    USER_ID_HEADER,
)

__all__ = [
    "RequestContextMiddleware",
    "RequestContext",
    "get_request_context",
    "get_request_id",
    "get_user_id",
    "REQUEST_ID_HEADER",
    "USER_ID_HEADER",
]
