from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from playlist_api.models.user import User, Role
from playlist_api.core.security import hash_password, verify_password
from playlist_api.core.constants import MusicRoles
from playlist_api.services.token_service import TokenService
from playlist_api.services.session_service import SessionService
from datetime import datetime, timedelta, timezone
from typing import Optional
from playlist_api.utils.errors import (
    InvalidCredentialsError, UserNotFoundError, ValidationFailedError,
    TokenInvalidError, SessionInvalidError,
)
import logging
import uuid

logger = logging.getLogger(__name__)

USERNAME_TAKEN = "Username already taken"
EMAIL_TAKEN = "Email already taken"


class AuthService:

    def __init__(
        self,
        db: Session,
        tokens: TokenService,
        sessions: SessionService,
        session_expire_days: int = 3,
    ):
        self.db = db
        self.tokens = tokens
        self.sessions = sessions
        self.session_expire_days = session_expire_days

    def _session_expiry(self) -> datetime:
        return datetime.now(timezone.utc) + timedelta(days=self.session_expire_days)

    def get_user_by_name(self, user_name: str) -> Optional[User]:
        return self.db.query(User).filter(User.user_name == user_name).first()

    def _taken_errors(self, user_name: str, email: str) -> dict:
        errors = {}
        if self.get_user_by_name(user_name):
            errors["userName"] = [USERNAME_TAKEN]
        if self.db.query(User).filter(User.email == email.strip().lower()).first():
            errors["email"] = [EMAIL_TAKEN]
        return errors

    def _raise_taken(self, errors: dict):
        detail = "; ".join(message for messages in errors.values() for message in messages)
        raise ValidationFailedError(detail, errors=errors)

    def register(
        self,
        user_name: str,
        email: str,
        password: str,
        role: str = MusicRoles.MUSIC_USER.value,
    ) -> User:
        """
        Create a user and assign its role in one transaction.
        - Username and email must be unused
        - If the role cannot be assigned nothing is persisted
        """
        errors = self._taken_errors(user_name, email)
        if errors:
            self._raise_taken(errors)

        try:
            user = User(
                user_name=user_name,
                email=email,
                password_hash=hash_password(password),
            )
            self.db.add(user)
            self.db.flush()

            db_role = self.db.query(Role).filter(Role.name == role).first()
            if db_role is None:
                raise ValidationFailedError(
                    f"Role '{role}' does not exist",
                    errors={"role": [f"Role '{role}' does not exist"]},
                )
            user.roles.append(db_role)
            self.db.commit()
        except IntegrityError:
            # Lost a race with a concurrent registration; report the column that collided
            self.db.rollback()
            self._raise_taken(
                self._taken_errors(user_name, email) or {"userName": [USERNAME_TAKEN]}
            )
        except Exception:
            self.db.rollback()
            raise

        logger.info("Registered user %s", user.id)
        return user

    def verify_credentials(self, user_name: str, password: str) -> User:
        user = self.get_user_by_name(user_name)
        if user is None:
            raise UserNotFoundError()
        if not verify_password(password, user.password_hash):
            raise InvalidCredentialsError()
        return user

    def login(
        self,
        user_name: str,
        password: str,
        ip_address: str | None = None,
        user_agent: str = "",
    ) -> dict:
        """
        Username/password login
        - Verify credentials
        - Create access & refresh tokens
        - Track session
        """
        user = self.verify_credentials(user_name, password)

        session_id = str(uuid.uuid4())
        expires_at = self._session_expiry()
        access_token = self.tokens.create_access_token(user.user_name, user.id, user.role_names)
        refresh_token = self.tokens.create_refresh_token(session_id, user.id, expires_at)

        self.sessions.create_session(
            session_id=session_id,
            user_id=user.id,
            refresh_token=refresh_token,
            expires_at=expires_at,
            ip_address=ip_address,
            user_agent=user_agent,
        )
        logger.info("User %s logged in, session %s", user.id, session_id)

        return {
            "access_token": access_token,
            "refresh_token": refresh_token,
            "expires_at": expires_at,
            "session_id": session_id,
            "user_id": user.id,
        }

    def _parse_session_id(self, refresh_token: Optional[str]) -> tuple[str, dict]:
        if not refresh_token:
            raise TokenInvalidError("Missing refresh token")

        claims = self.tokens.try_parse_refresh_token(refresh_token)
        if not claims:
            raise TokenInvalidError()

        session_id = claims.get("session_id")
        if not session_id or not str(session_id).strip():
            raise TokenInvalidError("Refresh token has no session")
        return str(session_id), claims

    def refresh(self, refresh_token: Optional[str]) -> dict:
        """
        Exchange the current refresh token for a new token pair.
        - Validate refresh JWT and session record
        - Rotate the session onto the new refresh token
        """
        session_id, claims = self._parse_session_id(refresh_token)

        if not self.sessions.is_session_valid(session_id, refresh_token):
            raise SessionInvalidError()

        user = self.db.get(User, str(claims.get("sub")))
        if user is None:
            raise SessionInvalidError("Session owner no longer exists")

        expires_at = self._session_expiry()
        access_token = self.tokens.create_access_token(user.user_name, user.id, user.role_names)
        new_refresh_token = self.tokens.create_refresh_token(session_id, user.id, expires_at)

        rotated = self.sessions.extend_session(
            session_id,
            new_refresh_token,
            expires_at,
            expected_refresh_token=refresh_token,
        )
        if not rotated:
            raise SessionInvalidError("Session was rotated concurrently")

        return {
            "access_token": access_token,
            "refresh_token": new_refresh_token,
            "expires_at": expires_at,
            "session_id": session_id,
            "user_id": user.id,
        }

    def logout(self, refresh_token: Optional[str]) -> str:
        session_id, _ = self._parse_session_id(refresh_token)
        self.sessions.invalidate_session(session_id)
        logger.info("Session %s logged out", session_id)
        return session_id
