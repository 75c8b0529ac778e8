"""User response schemas."""
from pydantic import BaseModel, ConfigDict, Field


class UserRead(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    user_name: str = Field(..., alias="userName")
    email: str
    roles: list[str]

    @classmethod
    def from_user(cls, user) -> "UserRead":
        return cls(id=user.id, user_name=user.user_name, email=user.email, roles=user.role_names)
