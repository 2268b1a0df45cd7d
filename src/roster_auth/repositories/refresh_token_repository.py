"""Abstract repository interface for issued refresh tokens.

Only a SHA-256 digest of each token is stored, never the token itself.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from uuid import UUID


@dataclass(frozen=True)
class RefreshTokenData:
    """Immutable view of a stored refresh token."""

    id: str
    user_id: str
    token_hash: str
    expires_at: datetime
    revoked_at: datetime | None
    created_at: datetime

    @property
    def is_revoked(self) -> bool:
        return self.revoked_at is not None


class RefreshTokenRepository(ABC):
    """Persistence for refresh tokens, used for rotation and revocation."""

    @abstractmethod
    async def save(
        self,
        user_id: UUID,
        token_hash: str,
        expires_at: datetime,
    ) -> RefreshTokenData:
        """Store a newly issued refresh token."""

    @abstractmethod
    async def find_by_hash(self, token_hash: str) -> RefreshTokenData | None:
        """Find a stored token by its digest."""

    @abstractmethod
    async def revoke(self, token_hash: str) -> bool:
        """Revoke a single token. Returns False if it was unknown."""

    @abstractmethod
    async def revoke_all_for_user(self, user_id: UUID) -> int:
        """Revoke every active token of a user. Returns the number revoked."""

    @abstractmethod
    async def delete_expired(self) -> int:
        """Remove expired tokens. Returns the number removed."""
