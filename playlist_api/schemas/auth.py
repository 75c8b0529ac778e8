import re
from pydantic import BaseModel, EmailStr, Field, field_validator, ConfigDict


class RegisterRequest(BaseModel):
    """Account registration request"""
    model_config = ConfigDict(populate_by_name=True)

    user_name: str = Field(..., alias="userName", min_length=3, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=255)

    @field_validator("user_name")
    def strip_user_name(cls, v):
        v = v.strip()
        if len(v) < 3:
            raise ValueError("User name must be at least 3 characters")
        return v

    @field_validator("password")
    def password_strength(cls, v):
        """Password must contain uppercase, lowercase, digit, special char"""
        if not re.search(r"[A-Z]", v):
            raise ValueError("Password must contain an uppercase letter")
        if not re.search(r"[a-z]", v):
            raise ValueError("Password must contain a lowercase letter")
        if not re.search(r"[0-9]", v):
            raise ValueError("Password must contain a digit")
        if not re.search(r"[^a-zA-Z0-9]", v):
            raise ValueError("Password must contain a special character")
        return v


class LoginRequest(BaseModel):
    """Username/password login request"""
    model_config = ConfigDict(populate_by_name=True)

    user_name: str = Field(..., alias="userName", min_length=1)
    password: str = Field(..., min_length=1)


class AccessTokenResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    access_token: str = Field(..., alias="accessToken")


class RegisteredUser(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(..., alias="userId")
    user_name: str = Field(..., alias="userName")
    roles: list[str]
