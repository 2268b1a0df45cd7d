"""SQLAlchemy storage for credentials and refresh tokens."""

from roster_auth.persistence.sqlalchemy.base import AuthBase
from roster_auth.persistence.sqlalchemy.models import (
    RefreshTokenModel,
    UserCredentialModel,
)
from roster_auth.persistence.sqlalchemy.repositories import (
    RefreshTokenRepositorySQLAlchemy,
    UserCredentialRepositorySQLAlchemy,
)

__all__ = [
    "AuthBase",
    "RefreshTokenModel",
    "RefreshTokenRepositorySQLAlchemy",
    "UserCredentialModel",
    "UserCredentialRepositorySQLAlchemy",
]
