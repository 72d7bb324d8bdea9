"""
Application exceptions.

WHAT: One exception class per failure the API reports, each carrying its
HTTP status code.

WHY: Services raise these and never build responses. The handlers in
exception_handlers turn any of them into the same JSON envelope:
``{"error", "message", "status_code", "details"}``.
"""

from typing import Any, Dict, Optional


# Context keys never echoed back to clients
SENSITIVE_CONTEXT_KEYS = frozenset({"password", "token", "secret", "key", "api_key"})


class AppException(Exception):
    """
    Root of the exception hierarchy.

    Keyword arguments beyond ``message`` and ``status_code`` are kept as
    context and returned under ``details``.
    """

    status_code: int = 500
    default_message: str = "An unexpected error occurred"

    def __init__(
        self,
        message: Optional[str] = None,
        status_code: Optional[int] = None,
        **context: Any,
    ):
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code
        self.context = context
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """
        Build the response body.

        Returns:
            Error envelope with sensitive context keys removed
        """
        details = {
            k: v for k, v in self.context.items() if k.lower() not in SENSITIVE_CONTEXT_KEYS
        }
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "status_code": self.status_code,
            "details": details or None,
        }


class ValidationError(AppException):
    """
    Request data the caller has to fix (HTTP 400).

    Raised with ``field=`` naming the offending input, e.g. ``items[1].quantity``.
    """

    status_code = 400
    default_message = "Validation failed"


class ResourceNotFoundError(AppException):
    """A referenced record does not exist (HTTP 404)."""

    status_code = 404
    default_message = "Resource not found"


class ProjectNotFoundError(ResourceNotFoundError):
    default_message = "Project not found"


class EstimateNotFoundError(ResourceNotFoundError):
    """
    Estimate missing, or not in the project the request named.

    Both cases look identical to the caller.
    """

    default_message = "Estimate not found"


class InvalidStateTransitionError(AppException):
    """
    Status change outside the strict transition table (HTTP 400).

    Only raised when ESTIMATE_STRICT_TRANSITIONS is enabled.
    """

    status_code = 400
    default_message = "Invalid state transition"


class DatabaseError(AppException):
    """
    Storage failure (HTTP 500).

    The response carries this generic message only; the driver error is
    logged server-side.
    """

    status_code = 500
    default_message = "Database error"

