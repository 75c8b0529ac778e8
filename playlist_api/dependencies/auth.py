from typing import Optional
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from playlist_api.dependencies.services import get_token_service
from playlist_api.services.token_service import TokenService
from playlist_api.utils.errors import Unauthorized, Forbidden

security = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    tokens: TokenService = Depends(get_token_service),
) -> dict:
    """Verify the bearer access token and return its claims"""
    if credentials is None or not credentials.credentials:
        raise Unauthorized("Not authenticated")

    payload = tokens.decode_access_token(credentials.credentials)
    if payload is None or not payload.get("sub"):
        raise Unauthorized("Invalid token")
    return payload


def require_roles(*roles: str):
    """Build a dependency that lets the request through if the caller holds any of ``roles``."""
    allowed = set(roles)

    async def checker(current_user: dict = Depends(get_current_user)) -> dict:
        if not allowed.intersection(current_user.get("roles") or []):
            raise Forbidden("Insufficient role")
        return current_user

    return checker
