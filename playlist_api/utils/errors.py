"""Custom error definitions for API exceptions.

Every error carries a ``kind`` so clients can branch on it instead of
probing the response shape. Account and session failures all surface as
422 Unprocessable Entity.
"""
from typing import Dict, List, Optional

from fastapi import HTTPException
from starlette import status


class AppError(HTTPException):
    kind = "error"

    def __init__(
        self,
        detail: str,
        status_code: int = status.HTTP_422_UNPROCESSABLE_ENTITY,
        errors: Optional[Dict[str, List[str]]] = None,
    ):
        super().__init__(status_code=status_code, detail=detail)
        self.errors = errors


class Unauthorized(AppError):
    kind = "unauthorized"

    def __init__(self, detail: str = "Unauthorized"):
        super().__init__(detail, status_code=status.HTTP_401_UNAUTHORIZED)
        self.headers = {"WWW-Authenticate": "Bearer"}


class Forbidden(AppError):
    kind = "forbidden"

    def __init__(self, detail: str = "Forbidden"):
        super().__init__(detail, status_code=status.HTTP_403_FORBIDDEN)


class UserNotFoundError(AppError):
    kind = "not_found"

    def __init__(self, detail: str = "User does not exist"):
        super().__init__(detail)


class InvalidCredentialsError(AppError):
    kind = "invalid_credentials"

    def __init__(self, detail: str = "Invalid password or username"):
        super().__init__(detail)


class ValidationFailedError(AppError):
    kind = "validation_failed"

    def __init__(self, detail: str = "Invalid input", errors: Optional[Dict[str, List[str]]] = None):
        super().__init__(detail, errors=errors)


class TokenInvalidError(AppError):
    kind = "token_invalid"

    def __init__(self, detail: str = "Invalid refresh token"):
        super().__init__(detail)


class SessionInvalidError(AppError):
    kind = "session_invalid"

    def __init__(self, detail: str = "Session is invalid or expired"):
        super().__init__(detail)


class RefreshRejectedError(AppError):
    """Uniform failure for the refresh and logout endpoints."""

    kind = "invalid_refresh_token"

    def __init__(self, detail: str = "Invalid or missing refresh token."):
        super().__init__(detail)
