"""JWT issuing and parsing for access and refresh tokens.

Access tokens are stateless: they carry the user id (``sub``), ``username``
and ``roles`` and are trusted on signature and expiry alone. Refresh tokens
carry the ``session_id`` they belong to; a parsed refresh token is only half
the check, the session store decides whether it is still the current one.
"""
from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any, Iterable
import logging
import uuid

from jose import JWTError, jwt

from playlist_api.core.config import Settings
from playlist_api.core.constants import TokenType

logger = logging.getLogger(__name__)


class TokenService:

    def __init__(
        self,
        secret_key: str,
        algorithm: str = "HS256",
        issuer: str | None = None,
        audience: str | None = None,
        access_token_expire_minutes: int = 20,
    ):
        if not secret_key:
            raise ValueError(
                "SECRET_KEY is not configured. Set the SECRET_KEY environment variable or add it to your .env file."
            )
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.issuer = issuer
        self.audience = audience
        self.access_token_expire_minutes = access_token_expire_minutes

    @classmethod
    def from_settings(cls, settings: Settings) -> "TokenService":
        return cls(
            secret_key=settings.SECRET_KEY,
            algorithm=settings.ALGORITHM,
            issuer=settings.JWT_VALID_ISSUER,
            audience=settings.JWT_VALID_AUDIENCE,
            access_token_expire_minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES,
        )

    def _encode(self, payload: Dict[str, Any], expires_at: datetime) -> str:
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=timezone.utc)
        payload.update({
            "exp": expires_at,
            "jti": str(uuid.uuid4()),
        })
        if self.issuer:
            payload["iss"] = self.issuer
        if self.audience:
            payload["aud"] = self.audience
        return jwt.encode(payload, self.secret_key, algorithm=self.algorithm)

    def _decode(self, token: str) -> Optional[Dict[str, Any]]:
        if not token or not isinstance(token, str):
            return None
        try:
            return jwt.decode(
                token,
                self.secret_key,
                algorithms=[self.algorithm],
                audience=self.audience,
                issuer=self.issuer,
            )
        except JWTError as exc:
            logger.debug("Token rejected: %s", exc)
            return None

    def create_access_token(
        self,
        user_name: str,
        user_id: str,
        roles: Iterable[str],
        expires_delta: Optional[timedelta] = None,
    ) -> str:
        expires_at = datetime.now(timezone.utc) + (
            expires_delta or timedelta(minutes=self.access_token_expire_minutes)
        )
        return self._encode(
            {
                "sub": str(user_id),
                "username": user_name,
                "roles": list(roles),
                "type": TokenType.ACCESS.value,
            },
            expires_at,
        )

    def create_refresh_token(self, session_id: str, user_id: str, expires_at: datetime) -> str:
        return self._encode(
            {
                "sub": str(user_id),
                "session_id": str(session_id),
                "type": TokenType.REFRESH.value,
            },
            expires_at,
        )

    def decode_access_token(self, token: str) -> Optional[Dict[str, Any]]:
        payload = self._decode(token)
        if payload and payload.get("type") == TokenType.ACCESS.value:
            return payload
        return None

    def try_parse_refresh_token(self, token: str) -> Optional[Dict[str, Any]]:
        """Return the refresh token claims, or None if the token is unusable."""
        payload = self._decode(token)
        if payload and payload.get("type") == TokenType.REFRESH.value:
            return payload
        return None
