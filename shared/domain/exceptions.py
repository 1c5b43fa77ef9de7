"""
Domain Errors

Error taxonomy shared by every app. Services raise these; the API layer
turns them into ``{"ok": false, "error": ...}`` responses using the
``status_code`` carried by each class.
"""

from __future__ import annotations


class DomainError(Exception):
    """Base class for errors that map onto an HTTP status."""

    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class UnauthorizedError(DomainError):
    """No authenticated session."""

    status_code = 401
    default_message = "Unauthorized"


class ForbiddenError(DomainError):
    """Authenticated, but the role or ownership does not allow the action."""

    status_code = 403
    default_message = "Forbidden"


class NotFoundError(DomainError):
    status_code = 404
    default_message = "Not found"


class ValidationError(DomainError):
    """Malformed input: unknown status, empty reason and so on."""

    status_code = 400
    default_message = "Invalid request"


class ConflictError(DomainError):
    """The request is valid but the current state does not allow it."""

    status_code = 409
    default_message = "Conflict"


class InternalError(DomainError):
    status_code = 500
    default_message = "Internal server error"
