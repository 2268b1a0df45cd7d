"""SQLAlchemy implementation of PersonRepository."""

import logging
from typing import List, Optional, Sequence
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from roster.domain.people import Person, PersonRepository
from roster.domain.shared import ConcurrencyError
from roster.domain.shared.time import ensure_tz_aware
from roster.infrastructure.persistence.sqlalchemy.models import (
    PersonModel,
    RoleModel,
)
from roster.infrastructure.persistence.sqlalchemy.repositories.role_repository import (  # NOQA: E501
    role_model_to_domain,
)

logger = logging.getLogger(__name__)


class PersonRepositorySQLAlchemy(PersonRepository):
    """SQLAlchemy implementation of the PersonRepository interface."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def find_all(self) -> List[Person]:
        stmt = select(PersonModel).order_by(PersonModel.full_name)
        result = await self._session.execute(stmt)
        return [self._map_to_domain(model) for model in result.scalars().all()]

    async def find_by_id(self, person_id: UUID) -> Optional[Person]:
        model = await self._find_model_by_id(person_id)
        return self._map_to_domain(model) if model else None

    async def save(self, person: Person) -> None:
        existing = await self._find_model_by_id(person.id)
        role_models = await self._load_role_models(person.role_ids)

        if existing:
            self._update_model(existing, person)
            existing.roles = role_models
            logger.debug("Updated person: %s", person.id)
        else:
            model = self._map_to_model(person)
            model.roles = role_models
            self._session.add(model)
            logger.info("Created person: %s", person.id)

        try:
            await self._session.flush()
        except StaleDataError as e:
            raise ConcurrencyError(
                details={
                    "person_id": str(person.id),
                    "row_version": person.row_version,
                },
            ) from e

    async def delete(self, person_id: UUID) -> bool:
        model = await self._find_model_by_id(person_id)
        if model is None:
            return False

        await self._session.delete(model)
        await self._session.flush()
        logger.info("Deleted person: %s", person_id)
        return True

    async def count(self) -> int:
        result = await self._session.execute(
            select(func.count()).select_from(PersonModel),
        )
        return int(result.scalar_one())

    async def search_by_name(self, fragment: str) -> List[Person]:
        stmt = (
            select(PersonModel)
            .where(
                func.lower(PersonModel.full_name).contains(
                    fragment.strip().lower(),
                    autoescape=True,
                ),
            )
            .order_by(PersonModel.full_name)
        )
        result = await self._session.execute(stmt)
        return [self._map_to_domain(model) for model in result.scalars().all()]

    async def find_by_role_name(self, role_name: str) -> List[Person]:
        stmt = (
            select(PersonModel)
            .where(self._holds_role(role_name))
            .order_by(PersonModel.full_name)
        )
        result = await self._session.execute(stmt)
        return [self._map_to_domain(model) for model in result.scalars().all()]

    async def exists_with_role_name(self, role_name: str) -> bool:
        stmt = select(PersonModel.id).where(self._holds_role(role_name)).limit(1)
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none() is not None

    @staticmethod
    def _holds_role(role_name: str):
        return PersonModel.roles.any(RoleModel.name == role_name.strip())

    async def _find_model_by_id(self, person_id: UUID) -> Optional[PersonModel]:
        stmt = select(PersonModel).where(PersonModel.id == person_id)
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def _load_role_models(self, role_ids: Sequence[UUID]) -> list[RoleModel]:
        if not role_ids:
            return []
        stmt = select(RoleModel).where(RoleModel.id.in_(role_ids))
        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    def _map_to_domain(self, model: PersonModel) -> Person:
        return Person.reconstitute(
            id=model.id,
            full_name=model.full_name,
            phone=model.phone,
            roles=[role_model_to_domain(role) for role in model.roles],
            row_version=model.row_version,
            created_at=ensure_tz_aware(model.created_at),
            updated_at=ensure_tz_aware(model.updated_at),
        )

    def _map_to_model(self, person: Person) -> PersonModel:
        return PersonModel(
            id=person.id,
            full_name=person.full_name,
            phone=person.phone,
            row_version=person.row_version,
            created_at=person.created_at,
            updated_at=person.updated_at,
        )

    def _update_model(self, model: PersonModel, person: Person) -> None:
        model.full_name = person.full_name
        model.phone = person.phone
        model.row_version = person.row_version
        model.updated_at = person.updated_at
