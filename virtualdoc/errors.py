"""
Application error taxonomy.

Services raise these; the API layer turns them into JSON responses using
``status_code`` and ``message``.
"""

from typing import Optional


class AppError(Exception):
    """Base class for errors that map to an HTTP response."""
    status_code: int = 500

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ValidationError(AppError):
    """Missing or malformed client input."""
    status_code = 400


class ConflictError(AppError):
    """Resource already exists (duplicate email)."""
    status_code = 409


class AuthError(AppError):
    """Bad credentials. Same message for unknown email and wrong password."""
    status_code = 401


class AuthzError(AppError):
    """Missing (401) or invalid/expired (403) bearer token."""
    status_code = 403


class NotFoundError(AppError):
    status_code = 404


class InternalError(AppError):
    """Storage failure. The cause is kept on ``__cause__`` and never sent outside development."""
    status_code = 500


class ServiceUnavailableError(AppError):
    """An optional integration is not configured."""
    status_code = 503
