"""SQLAlchemy implementation of DatabaseMaintenancePort.

This adapter implements the maintenance operations using SQLAlchemy,
keeping the application layer free from database-specific dependencies.
"""

import logging

from sqlalchemy import delete, func, select, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from roster.application.ports import DatabaseMaintenancePort
from roster.infrastructure.persistence.sqlalchemy.models import (
    PersonModel,
    RoleModel,
    UserModel,
    person_roles,
)

logger = logging.getLogger(__name__)


class SqlAlchemyDatabaseMaintenanceAdapter(DatabaseMaintenancePort):
    """SQLAlchemy implementation of database maintenance operations."""

    def __init__(self, session: AsyncSession):
        self._session = session

    async def delete_people_and_roles(self) -> dict[str, int]:
        # Association rows first so no FK is ever violated
        deleted: dict[str, int] = {}
        for name, stmt in (
            ("person_roles", delete(person_roles)),
            ("people", delete(PersonModel)),
            ("roles", delete(RoleModel)),
        ):
            result = await self._session.execute(stmt)
            deleted[name] = result.rowcount or 0
        await self._session.flush()
        # Bulk deletes bypass the identity map
        self._session.expunge_all()
        return deleted

    async def table_counts(self) -> dict[str, int]:
        counts: dict[str, int] = {}
        for name, model in (
            ("people", PersonModel),
            ("roles", RoleModel),
            ("users", UserModel),
        ):
            result = await self._session.execute(
                select(func.count()).select_from(model),
            )
            counts[name] = int(result.scalar_one())
        return counts

    async def can_connect(self) -> bool:
        try:
            await self._session.execute(text("SELECT 1"))
        except SQLAlchemyError as e:
            logger.warning("Database connectivity check failed: %s", e)
            return False
        return True
