from roster_auth.persistence.sqlalchemy.repositories.refresh_token_repository import (
    RefreshTokenRepositorySQLAlchemy,
)
from roster_auth.persistence.sqlalchemy.repositories.user_credential_repository import (
    UserCredentialRepositorySQLAlchemy,
)

__all__ = [
    "RefreshTokenRepositorySQLAlchemy",
    "UserCredentialRepositorySQLAlchemy",
]
