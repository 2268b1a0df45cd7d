"""Bodies of the ``/api/auth`` endpoints."""

from datetime import datetime
from uuid import UUID

from pydantic import ConfigDict, EmailStr, Field

from roster.domain.user import User
from roster.presentation.api.schemas.common import CamelModel


class RegisterRequest(CamelModel):
    email: EmailStr
    # Strength rules beyond length are checked by PasswordHashingService
    password: str = Field(min_length=8, max_length=128)
    first_name: str = Field(default="", max_length=100)
    last_name: str = Field(default="", max_length=100)

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "email": "ada@example.com",
                "password": "Analytical1843",
                "firstName": "Ada",
                "lastName": "Lovelace",
            },
        },
    )


class LoginRequest(CamelModel):
    email: EmailStr
    password: str


class RefreshRequest(CamelModel):
    """Optional body of ``/refresh``; without it the cookie is used."""

    refresh_token: str | None = None


class UserResponse(CamelModel):
    id: UUID
    email: str
    first_name: str
    last_name: str
    role: str
    created_at: datetime

    @classmethod
    def from_domain(cls, user: User) -> "UserResponse":
        return cls(
            id=user.id,
            email=user.email,
            first_name=user.first_name,
            last_name=user.last_name,
            role=user.role.value,
            created_at=user.created_at,
        )


class TokenResponse(CamelModel):
    access_token: str
    refresh_token: str | None = None
    token_type: str = "bearer"
    # Seconds until the access token expires
    expires_in: int


class AuthResponse(TokenResponse):
    """Tokens plus the signed-in user, returned by register and login."""

    user: UserResponse
