"""Storage of password hashes and login throttling state."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from roster_auth.schemas import LockoutPolicy


@dataclass(frozen=True)
class UserCredentialData:
    user_id: UUID
    password_hash: str
    failed_login_attempts: int = 0
    locked_until: datetime | None = None
    last_login_at: datetime | None = None

    def is_locked(self, now: datetime) -> bool:
        return self.locked_until is not None and self.locked_until > now


class UserCredentialRepository(ABC):
    """One credential record per user, kept apart from the user's profile."""

    @abstractmethod
    async def save(self, user_id: UUID, password_hash: str) -> UserCredentialData:
        """Store ``password_hash`` for the user, replacing any earlier one."""

    @abstractmethod
    async def find_by_user_id(self, user_id: UUID) -> UserCredentialData | None:
        pass

    @abstractmethod
    async def record_failed_login(
        self,
        user_id: UUID,
        policy: LockoutPolicy,
    ) -> UserCredentialData | None:
        """
        Count one wrong password.

        Locks the account for ``policy.duration`` once the count reaches
        ``policy.max_failed_attempts``. Returns None for an unknown user.
        """

    @abstractmethod
    async def record_successful_login(self, user_id: UUID) -> None:
        """Forget earlier failures, lift any lock and stamp the login time."""

    @abstractmethod
    async def delete(self, user_id: UUID) -> bool:
        pass
