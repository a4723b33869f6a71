"""Request/response schemas for registration, login and profiles.

Responses are wrapped in ApiResponse at the router layer.
"""

from typing import Any

from pydantic import ConfigDict, EmailStr, Field, field_validator

from src.sx_common.datetime_utils import iso_or_none
from src.sx_common.response import CamelModel
from src.sx_gateway.auth.password import password_fits
from src.sx_gateway.user.db_models import UserModel


class RegisterRequest(CamelModel):
    name: str = Field(..., min_length=2, max_length=50)
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=128)
    age: int = Field(..., ge=13, le=120)
    address: str = Field(..., max_length=200)
    phone: str | None = Field(None, max_length=15)

    @field_validator("name", "address", mode="before")
    @classmethod
    def strip_text(cls, v: Any) -> Any:
        return v.strip() if isinstance(v, str) else v

    @field_validator("email")
    @classmethod
    def lower_email(cls, v: str) -> str:
        return v.lower()

    @field_validator("password")
    @classmethod
    def bcrypt_limit(cls, v: str) -> str:
        if not password_fits(v):
            raise ValueError("Password cannot exceed 72 bytes")
        return v


class LoginRequest(CamelModel):
    email: EmailStr
    password: str

    @field_validator("email")
    @classmethod
    def lower_email(cls, v: str) -> str:
        return v.lower()


class RefreshRequest(CamelModel):
    refresh_token: str


class ProfileUpdateRequest(CamelModel):
    """Only these keys are writable; anything else in the body is ignored."""

    model_config = ConfigDict(extra="ignore")

    name: str | None = Field(None, min_length=2, max_length=50)
    age: int | None = Field(None, ge=13, le=120)
    address: str | None = Field(None, max_length=200)
    profile_picture: str | None = Field(None, max_length=500)

    @field_validator("name", "address", mode="before")
    @classmethod
    def strip_text(cls, v: Any) -> Any:
        return v.strip() if isinstance(v, str) else v


class UserInfo(CamelModel):
    id: str
    name: str
    email: str
    age: int
    address: str
    phone: str | None
    profile_picture: str | None
    member_since: str | None
    created_at: str | None

    @classmethod
    def from_model(cls, user: UserModel) -> "UserInfo":
        return cls(
            id=str(user.id),
            name=user.name,
            email=user.email,
            age=user.age,
            address=user.address,
            phone=user.phone,
            profile_picture=user.profile_picture,
            member_since=str(user.created_at.year) if user.created_at else None,
            created_at=iso_or_none(user.created_at),
        )


class TokenPair(CamelModel):
    access_token: str
    refresh_token: str
    token_type: str = "Bearer"
    expires_in: int


class AuthResponse(CamelModel):
    """Register and login both hand back the user plus a token pair."""

    user: UserInfo
    tokens: TokenPair


class RefreshResponse(CamelModel):
    access_token: str
    token_type: str = "Bearer"
    expires_in: int
