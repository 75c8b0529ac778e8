"""Per-request service construction."""
from fastapi import Depends
from sqlalchemy.orm import Session

from playlist_api.core.config import settings
from playlist_api.core.database import get_db
from playlist_api.services.auth_service import AuthService
from playlist_api.services.session_service import SessionService
from playlist_api.services.token_service import TokenService


def get_token_service() -> TokenService:
    return TokenService.from_settings(settings)


def get_session_service(db: Session = Depends(get_db)) -> SessionService:
    return SessionService(db)


def get_auth_service(
    db: Session = Depends(get_db),
    tokens: TokenService = Depends(get_token_service),
    sessions: SessionService = Depends(get_session_service),
) -> AuthService:
    return AuthService(
        db=db,
        tokens=tokens,
        sessions=sessions,
        session_expire_days=settings.SESSION_EXPIRE_DAYS,
    )
