"""
Application error taxonomy.

Services raise these; the handlers registered in app.main turn them into
the {success: false, message, errors} envelope with the matching status.
"""

from typing import List, Optional


class AppError(Exception):
    status_code = 500
    default_message = "Server error"

    def __init__(self, message: Optional[str] = None, errors: Optional[List[dict]] = None):
        self.message = message or self.default_message
        self.errors = errors
        super().__init__(self.message)


class ValidationError(AppError):
    """Malformed or out-of-range input."""
    status_code = 400
    default_message = "Validation failed"


class Unauthorized(AppError):
    """Missing or invalid credential."""
    status_code = 401
    default_message = "Not authorized"


class Forbidden(AppError):
    """Authenticated, but not entitled to the resource or action."""
    status_code = 403
    default_message = "Forbidden"


class NotFound(AppError):
    status_code = 404
    default_message = "Not found"


class Conflict(AppError):
    """Would violate a uniqueness or state invariant."""
    status_code = 409
    default_message = "Conflict"
