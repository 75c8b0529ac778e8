"""User profile endpoints."""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from playlist_api.core.constants import MusicRoles
from playlist_api.core.database import get_db
from playlist_api.dependencies.auth import get_current_user, require_roles
from playlist_api.models.user import User
from playlist_api.schemas.user import UserRead
from playlist_api.utils.errors import Unauthorized

router = APIRouter(prefix="/api/users", tags=["users"])


@router.get("/me", response_model=UserRead)
async def get_profile(
    current_user: dict = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    user = db.get(User, current_user["sub"])
    if user is None:
        raise Unauthorized("User not found")
    return UserRead.from_user(user)


@router.get("", response_model=list[UserRead])
async def list_users(
    _: dict = Depends(require_roles(MusicRoles.ADMIN.value)),
    db: Session = Depends(get_db),
):
    """Admin only: all users with their roles."""
    users = db.query(User).order_by(User.user_name).all()
    return [UserRead.from_user(user) for user in users]
