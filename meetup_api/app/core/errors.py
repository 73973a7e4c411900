"""
Domain exceptions raised by the service layer.

Services never build HTTP responses themselves.  They raise one of the
exceptions below and the handler registered in ``main.create_app``
turns it into a JSON response using ``status_code`` and ``detail``.
"""

from typing import Dict, Optional


class MeetupError(Exception):
    """Base class for all errors with a defined client-facing meaning."""

    status_code = 500
    detail = "Internal server error"

    def __init__(self, detail: Optional[str] = None) -> None:
        if detail is not None:
            self.detail = detail
        super().__init__(self.detail)


class ValidationError(MeetupError):
    """Input failed validation.

    ``errors`` maps each offending field to a message so that a form can
    highlight the fields individually.
    """

    status_code = 422
    detail = "Validation failed"

    def __init__(self, errors: Dict[str, str], detail: Optional[str] = None) -> None:
        self.errors = dict(errors)
        super().__init__(detail)


class ConflictError(MeetupError):
    status_code = 409
    detail = "Resource already exists"


class AuthenticationError(MeetupError):
    """Login failed.  The message never says which credential was wrong."""

    status_code = 401
    detail = "Invalid credentials"


class AuthorizationError(MeetupError):
    """A protected operation was invoked without a valid identity."""

    status_code = 401
    detail = "Not authenticated"


class NotFoundError(MeetupError):
    status_code = 404
    detail = "Not found"
