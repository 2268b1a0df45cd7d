from roster_auth.repositories.refresh_token_repository import (
    RefreshTokenData,
    RefreshTokenRepository,
)
from roster_auth.repositories.user_credential_repository import (
    UserCredentialData,
    UserCredentialRepository,
)

__all__ = [
    "RefreshTokenData",
    "RefreshTokenRepository",
    "UserCredentialData",
    "UserCredentialRepository",
]
