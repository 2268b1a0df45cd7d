from roster_auth.persistence.sqlalchemy.models.refresh_token_model import (
    RefreshTokenModel,
)
from roster_auth.persistence.sqlalchemy.models.user_credential_model import (
    UserCredentialModel,
)

__all__ = ["RefreshTokenModel", "UserCredentialModel"]
