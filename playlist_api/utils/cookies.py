"""Refresh token cookie handling."""
from datetime import datetime, timezone
from typing import Optional

from fastapi import Request, Response

from playlist_api.core.config import settings


def read_refresh_cookie(request: Request) -> Optional[str]:
    value = request.cookies.get(settings.REFRESH_COOKIE_NAME)
    return value or None


def set_refresh_cookie(response: Response, refresh_token: str, expires_at: datetime) -> None:
    if expires_at.tzinfo is None:
        expires_at = expires_at.replace(tzinfo=timezone.utc)
    response.set_cookie(
        key=settings.REFRESH_COOKIE_NAME,
        value=refresh_token,
        expires=expires_at.astimezone(timezone.utc),
        httponly=True,
        samesite="lax",
        secure=settings.REFRESH_COOKIE_SECURE,
    )


def clear_refresh_cookie(response: Response) -> None:
    response.delete_cookie(
        key=settings.REFRESH_COOKIE_NAME,
        httponly=True,
        samesite="lax",
        secure=settings.REFRESH_COOKIE_SECURE,
    )
