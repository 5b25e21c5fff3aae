"""Application error taxonomy mapped to HTTP status codes in main.py."""
from fastapi import status


class AppError(Exception):
    """Base class for errors reported to API clients"""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(AppError):
    """Missing or malformed input"""
    status_code = status.HTTP_400_BAD_REQUEST


class InvalidCredentialsError(ValidationError):
    """Unknown email or wrong password; the two are never distinguished"""

    def __init__(self, message: str = "Invalid credentials"):
        super().__init__(message)


class AuthenticationError(AppError):
    """Missing, invalid or expired bearer token"""
    status_code = status.HTTP_401_UNAUTHORIZED


class AuthorizationError(AppError):
    """Authenticated, but not allowed to touch the resource"""
    status_code = status.HTTP_403_FORBIDDEN


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND


class ConflictError(AppError):
    """Unique constraint violation such as a duplicate email"""
    status_code = status.HTTP_400_BAD_REQUEST


class InternalError(AppError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
