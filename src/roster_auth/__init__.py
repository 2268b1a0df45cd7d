"""Password and token handling for Roster, independent of people and roles.

``services`` holds the bcrypt and JWT logic, ``repositories`` the storage
interfaces for credentials and refresh tokens, and ``persistence`` their
SQLAlchemy implementations.
"""

from roster_auth.exceptions import (
    AccountLockedError,
    AuthError,
    InvalidCredentialsError,
    InvalidRefreshTokenError,
    InvalidTokenError,
    WeakPasswordError,
)
from roster_auth.repositories import (
    RefreshTokenRepository,
    UserCredentialRepository,
)
from roster_auth.schemas import LockoutPolicy, TokenPayload
from roster_auth.services import JWTService, PasswordHashingService

__all__ = [
    "AccountLockedError",
    "AuthError",
    "InvalidCredentialsError",
    "InvalidRefreshTokenError",
    "InvalidTokenError",
    "JWTService",
    "LockoutPolicy",
    "PasswordHashingService",
    "RefreshTokenRepository",
    "TokenPayload",
    "UserCredentialRepository",
    "WeakPasswordError",
]
