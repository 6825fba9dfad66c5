"""Custom exception hierarchy.

Services raise these; ``claimflow.main`` maps each family onto an HTTP status
code so endpoints never build error responses by hand.
"""

from typing import Optional


class AppError(Exception):
    """Base exception for application errors."""

    status_code = 500

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        super().__init__(message)
        self.message = message
        self.original_error = original_error


class ValidationError(AppError):
    """Raised when input validation fails."""

    status_code = 400


class AuthenticationError(AppError):
    """Raised when credentials or tokens are invalid."""

    status_code = 401


class ForbiddenError(AppError):
    """Raised when the actor may not perform the requested operation."""

    status_code = 403


class NotFoundError(AppError):
    """Raised when a claim, form or user does not exist."""

    status_code = 404


class ConflictError(AppError):
    """Raised when a one-to-one sub-form already exists."""

    status_code = 409


class InvalidTransitionError(ConflictError):
    """Raised when an action is not valid from the claim's current status."""

    pass


class DatabaseError(AppError):
    """Raised when a database operation fails."""

    pass


class StorageError(AppError):
    """Raised when an uploaded file cannot be stored."""

    pass
