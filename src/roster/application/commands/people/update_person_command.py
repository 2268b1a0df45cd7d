"""Update a person's details and role assignments."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Iterable, Optional
from uuid import UUID

from roster.application.commands.people.role_resolution import resolve_roles
from roster.domain.people import Person, PersonNotFoundError, PersonRepository
from roster.domain.roles import RoleRepository
from roster.domain.shared.exceptions import ConcurrencyError

if TYPE_CHECKING:
    from roster.application.factories import RepositoryFactory

logger = logging.getLogger(__name__)


class UpdatePersonCommand:
    """
    Replace a person's name, phone and roles.

    The update is a full replacement: an absent ``role_ids`` clears every
    assignment. When the caller sends the ``row_version`` it last saw and
    the stored one has moved on, the update is rejected.
    """

    def __init__(
        self,
        person_repository: PersonRepository,
        role_repository: RoleRepository,
    ):
        self._person_repo = person_repository
        self._role_repo = role_repository

    @classmethod
    def from_factory(cls, factory: RepositoryFactory) -> UpdatePersonCommand:
        return cls(
            person_repository=factory.person_repository(),
            role_repository=factory.role_repository(),
        )

    async def execute(  # NOQA: PLR0913
        self,
        person_id: UUID,
        full_name: str,
        phone: Optional[str] = None,
        role_ids: Optional[Iterable[UUID]] = None,
        row_version: Optional[int] = None,
    ) -> Person:
        person = await self._person_repo.find_by_id(person_id)
        if person is None:
            raise PersonNotFoundError(person_id)

        if row_version is not None and row_version != person.row_version:
            raise ConcurrencyError(
                details={
                    "person_id": str(person_id),
                    "expected_row_version": row_version,
                    "actual_row_version": person.row_version,
                },
            )

        roles = await resolve_roles(self._role_repo, role_ids)
        person.update(full_name=full_name, phone=phone, roles=roles)
        await self._person_repo.save(person)

        logger.info(
            "Person updated: %s (row_version=%d)",
            person.id,
            person.row_version,
        )
        return person
