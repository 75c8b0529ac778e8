import logging
from fastapi import APIRouter, Depends, Request, Response, status
from playlist_api.schemas.auth import (
    RegisterRequest, LoginRequest, AccessTokenResponse, RegisteredUser,
)
from playlist_api.schemas.common import SuccessResponse, ErrorResponse
from playlist_api.services.auth_service import AuthService
from playlist_api.utils.errors import (
    TokenInvalidError, SessionInvalidError, RefreshRejectedError,
)
from playlist_api.dependencies.services import get_auth_service
from playlist_api.dependencies.rate_limit import rate_limit
from playlist_api.utils.cookies import read_refresh_cookie, set_refresh_cookie, clear_refresh_cookie
from playlist_api.utils.helpers import get_client_ip, get_user_agent

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api",
    tags=["authentication"],
    responses={422: {"model": ErrorResponse}},
)


@router.post(
    "/accounts",
    response_model=SuccessResponse,
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
)
async def register(
    request: RegisterRequest,
    auth: AuthService = Depends(get_auth_service),
    _: None = Depends(rate_limit),
):
    """
    Register a new account
    - Validate inputs
    - Create user and assign the MusicUser role in one transaction
    """
    user = auth.register(
        user_name=request.user_name,
        email=request.email,
        password=request.password,
    )
    registered = RegisteredUser(user_id=user.id, user_name=user.user_name, roles=user.role_names)
    return SuccessResponse(data=registered.model_dump(by_alias=True))


@router.post("/login", response_model=AccessTokenResponse, status_code=200)
async def login(
    request: LoginRequest,
    http_request: Request,
    response: Response,
    auth: AuthService = Depends(get_auth_service),
    _: None = Depends(rate_limit),
):
    """
    Username/password login
    - Verify credentials
    - Return access token, set refresh token cookie
    """
    result = auth.login(
        user_name=request.user_name,
        password=request.password,
        ip_address=get_client_ip(http_request),
        user_agent=get_user_agent(http_request),
    )
    set_refresh_cookie(response, result["refresh_token"], result["expires_at"])
    return {"accessToken": result["access_token"]}


@router.post("/accessToken", response_model=AccessTokenResponse, status_code=200)
async def refresh_access_token(
    http_request: Request,
    response: Response,
    auth: AuthService = Depends(get_auth_service),
    _: None = Depends(rate_limit),
):
    """Exchange the refresh token cookie for a new access token and rotated cookie."""
    try:
        result = auth.refresh(read_refresh_cookie(http_request))
    except (TokenInvalidError, SessionInvalidError) as e:
        logger.info("Refresh rejected: %s", e.detail)
        raise RefreshRejectedError()

    set_refresh_cookie(response, result["refresh_token"], result["expires_at"])
    return {"accessToken": result["access_token"]}


@router.post("/logout", response_model=SuccessResponse, response_model_exclude_none=True, status_code=200)
async def logout(
    http_request: Request,
    response: Response,
    auth: AuthService = Depends(get_auth_service),
):
    """Invalidate the session behind the refresh token cookie and clear it"""
    try:
        auth.logout(read_refresh_cookie(http_request))
    except TokenInvalidError as e:
        logger.info("Logout rejected: %s", e.detail)
        raise RefreshRejectedError()

    clear_refresh_cookie(response)
    return SuccessResponse(message="Logged out successfully")
