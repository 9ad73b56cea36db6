from typing import List, Optional

from fastapi import status


class AuthError(Exception):
    """Expected failure of an auth operation, safe to show to the client."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    default_message: str = "Request failed"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(AuthError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request"

    def __init__(self, message: Optional[str] = None, fields: Optional[List[str]] = None):
        super().__init__(message)
        self.fields = fields or []


class BadRequest(AuthError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request"


class DuplicateAccount(AuthError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "An account with this email already exists"


class InvalidCredentials(AuthError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Invalid email or password"


class AccountDeactivated(AuthError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Account is deactivated"


class Unauthenticated(AuthError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "No valid token provided"


class InvalidToken(Unauthenticated):
    """Token rejected. ``reason`` is for server logs only."""

    default_message = "Invalid or expired token"

    def __init__(self, reason: str = "malformed"):
        super().__init__()
        self.reason = reason


class ServiceError(AuthError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "An unexpected error occurred. Please try again."


class StoreUnavailable(Exception):
    """The credential store backend failed; details stay server-side."""
