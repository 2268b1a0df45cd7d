"""Credential rows in the ``user_credentials`` table."""

import logging
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from roster_auth.persistence.sqlalchemy.models import UserCredentialModel
from roster_auth.repositories import UserCredentialData, UserCredentialRepository
from roster_auth.schemas import LockoutPolicy
from roster_auth.timestamps import ensure_tz_aware, utc_now

logger = logging.getLogger(__name__)


def _aware_or_none(value):
    return ensure_tz_aware(value) if value is not None else None


class UserCredentialRepositorySQLAlchemy(UserCredentialRepository):
    def __init__(self, session: AsyncSession):
        self._session = session

    async def _get_row(self, user_id: UUID) -> UserCredentialModel | None:
        result = await self._session.execute(
            select(UserCredentialModel).where(
                UserCredentialModel.user_id == str(user_id),
            ),
        )
        return result.scalar_one_or_none()

    @staticmethod
    def _as_data(row: UserCredentialModel) -> UserCredentialData:
        return UserCredentialData(
            user_id=UUID(row.user_id),
            password_hash=row.password_hash,
            failed_login_attempts=row.failed_login_attempts,
            locked_until=_aware_or_none(row.locked_until),
            last_login_at=_aware_or_none(row.last_login_at),
        )

    async def save(self, user_id: UUID, password_hash: str) -> UserCredentialData:
        row = await self._get_row(user_id)
        if row is None:
            row = UserCredentialModel(
                user_id=str(user_id),
                password_hash=password_hash,
                failed_login_attempts=0,
            )
            self._session.add(row)
            logger.info("Stored password for user %s", user_id)
        else:
            row.password_hash = password_hash
            logger.debug("Replaced password for user %s", user_id)
        await self._session.flush()
        return self._as_data(row)

    async def find_by_user_id(self, user_id: UUID) -> UserCredentialData | None:
        row = await self._get_row(user_id)
        return None if row is None else self._as_data(row)

    async def record_failed_login(
        self,
        user_id: UUID,
        policy: LockoutPolicy,
    ) -> UserCredentialData | None:
        row = await self._get_row(user_id)
        if row is None:
            return None

        now = utc_now()
        if row.locked_until is not None and ensure_tz_aware(row.locked_until) <= now:
            # An expired lock starts a fresh series of attempts
            row.failed_login_attempts = 0
            row.locked_until = None

        row.failed_login_attempts += 1
        locked_until = policy.locked_until(row.failed_login_attempts, now)
        if locked_until is not None:
            row.locked_until = locked_until
            logger.warning(
                "Locking user %s until %s after %d failed logins",
                user_id,
                locked_until.isoformat(),
                row.failed_login_attempts,
            )
        await self._session.flush()
        return self._as_data(row)

    async def record_successful_login(self, user_id: UUID) -> None:
        row = await self._get_row(user_id)
        if row is None:
            return
        row.failed_login_attempts = 0
        row.locked_until = None
        row.last_login_at = utc_now()
        await self._session.flush()

    async def delete(self, user_id: UUID) -> bool:
        row = await self._get_row(user_id)
        if row is None:
            return False
        await self._session.delete(row)
        await self._session.flush()
        logger.info("Removed password for user %s", user_id)
        return True
