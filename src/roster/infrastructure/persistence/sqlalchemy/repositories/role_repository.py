"""SQLAlchemy implementation of RoleRepository."""

import logging
from typing import Iterable, List, Optional
from uuid import UUID

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from roster.domain.roles import DuplicateRoleNameError, Role, RoleRepository
from roster.domain.shared import ConcurrencyError
from roster.domain.shared.time import ensure_tz_aware
from roster.infrastructure.persistence.sqlalchemy.models import (
    RoleModel,
    person_roles,
)

logger = logging.getLogger(__name__)


def role_model_to_domain(model: RoleModel) -> Role:
    """Rebuild a Role entity from its row. Shared with the person repository."""
    return Role.reconstitute(
        id=model.id,
        name=model.name,
        description=model.description,
        row_version=model.row_version,
        created_at=ensure_tz_aware(model.created_at),
        updated_at=ensure_tz_aware(model.updated_at),
    )


class RoleRepositorySQLAlchemy(RoleRepository):
    """SQLAlchemy implementation of the RoleRepository interface."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def find_all(self) -> List[Role]:
        stmt = select(RoleModel).order_by(RoleModel.name)
        result = await self._session.execute(stmt)
        return [self._map_to_domain(model) for model in result.scalars().all()]

    async def find_by_id(self, role_id: UUID) -> Optional[Role]:
        model = await self._find_model_by_id(role_id)
        return self._map_to_domain(model) if model else None

    async def find_by_name(self, name: str) -> Optional[Role]:
        stmt = select(RoleModel).where(RoleModel.name == name.strip())
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._map_to_domain(model) if model else None

    async def find_by_ids(self, role_ids: Iterable[UUID]) -> List[Role]:
        ids = list(set(role_ids))
        if not ids:
            return []
        stmt = select(RoleModel).where(RoleModel.id.in_(ids)).order_by(RoleModel.name)
        result = await self._session.execute(stmt)
        return [self._map_to_domain(model) for model in result.scalars().all()]

    async def save(self, role: Role) -> None:
        existing = await self._find_model_by_id(role.id)

        try:
            if existing:
                self._update_model(existing, role)
                logger.debug("Updated role: %s", role.id)
            else:
                self._session.add(self._map_to_model(role))
                logger.info("Created role: %s (%s)", role.name, role.id)

            await self._session.flush()
        except IntegrityError as e:
            if "UNIQUE constraint failed" in str(e) or "unique" in str(e).lower():
                raise DuplicateRoleNameError(role.name) from e
            raise
        except StaleDataError as e:
            raise ConcurrencyError(
                details={"role_id": str(role.id), "row_version": role.row_version},
            ) from e

    async def delete(self, role_id: UUID) -> bool:
        model = await self._find_model_by_id(role_id)
        if model is None:
            return False

        # Detach from people first; SQLite only cascades with foreign_keys=ON
        await self._session.execute(
            delete(person_roles).where(person_roles.c.role_id == role_id),
        )
        await self._session.delete(model)
        await self._session.flush()
        logger.info("Deleted role: %s", role_id)
        return True

    async def count(self) -> int:
        result = await self._session.execute(
            select(func.count()).select_from(RoleModel),
        )
        return int(result.scalar_one())

    async def _find_model_by_id(self, role_id: UUID) -> Optional[RoleModel]:
        stmt = select(RoleModel).where(RoleModel.id == role_id)
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    def _map_to_domain(self, model: RoleModel) -> Role:
        return role_model_to_domain(model)

    def _map_to_model(self, role: Role) -> RoleModel:
        return RoleModel(
            id=role.id,
            name=role.name,
            description=role.description,
            row_version=role.row_version,
            created_at=role.created_at,
            updated_at=role.updated_at,
        )

    def _update_model(self, model: RoleModel, role: Role) -> None:
        model.name = role.name
        model.description = role.description
        model.row_version = role.row_version
        model.updated_at = role.updated_at
