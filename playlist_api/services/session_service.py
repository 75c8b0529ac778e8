"""Server-side session records for refresh token rotation."""
from datetime import datetime, timezone
from typing import Optional
import logging

from sqlalchemy import update
from sqlalchemy.orm import Session

from playlist_api.core.security import hash_token, tokens_match
from playlist_api.models.session import UserSession

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _naive_utc(value: datetime) -> datetime:
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


class SessionService:

    def __init__(self, db: Session):
        self.db = db

    def get_session(self, session_id: str) -> Optional[UserSession]:
        return self.db.get(UserSession, str(session_id))

    def create_session(
        self,
        session_id: str,
        user_id: str,
        refresh_token: str,
        expires_at: datetime,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> UserSession:
        session = UserSession(
            id=str(session_id),
            user_id=str(user_id),
            last_refresh_token=hash_token(refresh_token),
            initiated_at=_utcnow(),
            expires_at=_naive_utc(expires_at),
            ip_address=ip_address,
            user_agent=(user_agent or "")[:512] or None,
            is_revoked=False,
        )
        self.db.add(session)
        self.db.commit()
        return session

    def is_session_valid(self, session_id: str, refresh_token: str) -> bool:
        session = self.get_session(session_id)
        if session is None or session.is_revoked:
            return False
        if session.expires_at <= _utcnow():
            return False
        return tokens_match(refresh_token, session.last_refresh_token)

    def extend_session(
        self,
        session_id: str,
        refresh_token: str,
        expires_at: datetime,
        expected_refresh_token: str | None = None,
    ) -> bool:
        """
        Rotate the session onto a new refresh token and expiry.

        With ``expected_refresh_token`` the update only applies while the
        stored digest still matches it, so of two refreshes racing on the
        same token only one can win. Returns whether a row was updated.
        """
        stmt = update(UserSession).where(
            UserSession.id == str(session_id),
            UserSession.is_revoked.is_(False),
        )
        if expected_refresh_token is not None:
            stmt = stmt.where(UserSession.last_refresh_token == hash_token(expected_refresh_token))

        result = self.db.execute(
            stmt.values(
                last_refresh_token=hash_token(refresh_token),
                expires_at=_naive_utc(expires_at),
            )
        )
        self.db.commit()

        if result.rowcount != 1:
            logger.info("Session %s was not extended (revoked, missing or already rotated)", session_id)
            return False
        return True

    def invalidate_session(self, session_id: str) -> bool:
        session = self.get_session(session_id)
        if session is None:
            return False
        session.is_revoked = True
        self.db.commit()
        return True

    def invalidate_user_sessions(self, user_id: str) -> int:
        result = self.db.execute(
            update(UserSession)
            .where(UserSession.user_id == str(user_id), UserSession.is_revoked.is_(False))
            .values(is_revoked=True)
        )
        self.db.commit()
        return result.rowcount
