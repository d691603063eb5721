"""Profile and session models for authenticated users."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from .enums import UserRole


class Profile(BaseModel):
    """Application profile keyed by the auth user id."""

    model_config = ConfigDict(strict=True)

    id: str = Field(..., description="Auth provider user id (Cognito sub)")
    email: EmailStr
    first_name: str = ""
    last_name: str = ""
    role: UserRole = UserRole.TRAVELER
    phone: str | None = None
    avatar_url: str | None = None
    created_at: datetime
    updated_at: datetime


class ProfileUpdate(BaseModel):
    """Fields a user may change on their profile."""

    model_config = ConfigDict(strict=True)

    first_name: str | None = None
    last_name: str | None = None
    phone: str | None = None
    avatar_url: str | None = None


class AuthUser(BaseModel):
    """Identity claims for the signed-in user."""

    model_config = ConfigDict(strict=True)

    id: str
    email: str
    metadata: dict[str, str] = Field(default_factory=dict)


class Session(BaseModel):
    """Current authenticated session."""

    model_config = ConfigDict(strict=True)

    user: AuthUser
    access_token: str
    id_token: str | None = None
    refresh_token: str | None = None
    expires_at: datetime

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expires_at


class SignUpResult(BaseModel):
    """Result of a sign-up call."""

    model_config = ConfigDict(strict=True)

    user_id: str
    email: str
    confirmed: bool
