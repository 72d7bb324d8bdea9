"""
FastAPI dependencies shared by route handlers.

WHY: Dependencies keep request plumbing out of route bodies and make it
easy to override in tests.
"""

from typing import Optional
from fastapi import Request

from buildtrack.middleware.request_context import get_user_id


async def get_caller_id(request: Request) -> Optional[str]:
    """
    Get the acting user's identity.

    WHAT: Reads the optional X-User-Id header. There is no authentication;
    the value is taken as given and passed explicitly into services.

    Usage:
        @router.patch("")
        async def update(caller_id: Optional[str] = Depends(get_caller_id)):
            ...

    Returns:
        Caller identity, or None when the header is absent or blank
    """
    context = getattr(request.state, "context", None)
    if context is not None:
        return context.user_id
    return get_user_id(request)
