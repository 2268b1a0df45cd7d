"""Create a person with optional role assignments."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Iterable, Optional
from uuid import UUID

from roster.application.commands.people.role_resolution import resolve_roles
from roster.domain.people import Person, PersonRepository
from roster.domain.roles import RoleRepository

if TYPE_CHECKING:
    from roster.application.factories import RepositoryFactory

logger = logging.getLogger(__name__)


class CreatePersonCommand:
    """Validate input, resolve roles and store a new person."""

    def __init__(
        self,
        person_repository: PersonRepository,
        role_repository: RoleRepository,
    ):
        self._person_repo = person_repository
        self._role_repo = role_repository

    @classmethod
    def from_factory(cls, factory: RepositoryFactory) -> CreatePersonCommand:
        return cls(
            person_repository=factory.person_repository(),
            role_repository=factory.role_repository(),
        )

    async def execute(
        self,
        full_name: str,
        phone: Optional[str] = None,
        role_ids: Optional[Iterable[UUID]] = None,
    ) -> Person:
        roles = await resolve_roles(self._role_repo, role_ids)
        person = Person.create(full_name=full_name, phone=phone, roles=roles)
        await self._person_repo.save(person)

        logger.info("Person created: %s with %d role(s)", person.id, len(roles))
        return person
