"""Users stored in the ``users`` table."""

import logging
from typing import Optional, Union
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from roster.domain.shared.time import ensure_tz_aware
from roster.domain.user import Email, EmailAlreadyExistsError, User, UserRepository
from roster.infrastructure.persistence.sqlalchemy.models import UserModel

logger = logging.getLogger(__name__)


def _to_entity(row: UserModel) -> User:
    return User.reconstitute(
        id=row.id,
        email=row.email,
        first_name=row.first_name,
        last_name=row.last_name,
        role=row.role,
        created_at=ensure_tz_aware(row.created_at),
        updated_at=ensure_tz_aware(row.updated_at),
    )


def _copy_to_row(user: User, row: UserModel) -> UserModel:
    row.email = user.email
    row.first_name = user.first_name
    row.last_name = user.last_name
    row.role = user.role.value
    row.created_at = user.created_at
    row.updated_at = user.updated_at
    return row


class UserRepositorySQLAlchemy(UserRepository):
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def find_by_id(self, user_id: UUID) -> Optional[User]:
        row = await self._session.get(UserModel, user_id)
        return None if row is None else _to_entity(row)

    async def find_by_email(self, email: Union[str, Email]) -> Optional[User]:
        address = Email(email).value if isinstance(email, str) else email.value
        result = await self._session.execute(
            select(UserModel).where(UserModel.email == address),
        )
        row = result.scalar_one_or_none()
        return None if row is None else _to_entity(row)

    async def count(self) -> int:
        result = await self._session.execute(
            select(func.count()).select_from(UserModel),
        )
        return result.scalar_one()

    async def save(self, user: User) -> None:
        row = await self._session.get(UserModel, user.id)
        if row is None:
            self._session.add(_copy_to_row(user, UserModel(id=user.id)))
            logger.info("Stored new user %s <%s>", user.id, user.email)
        else:
            _copy_to_row(user, row)
        try:
            await self._session.flush()
        except IntegrityError as e:
            raise EmailAlreadyExistsError(user.email) from e

    async def delete(self, user_id: UUID) -> bool:
        row = await self._session.get(UserModel, user_id)
        if row is None:
            return False
        await self._session.delete(row)
        await self._session.flush()
        logger.info("Removed user %s", user_id)
        return True
