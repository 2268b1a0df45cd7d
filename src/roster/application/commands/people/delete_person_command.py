"""Delete a person."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING
from uuid import UUID

from roster.domain.people import PersonNotFoundError, PersonRepository

if TYPE_CHECKING:
    from roster.application.factories import RepositoryFactory

logger = logging.getLogger(__name__)


class DeletePersonCommand:
    def __init__(self, person_repository: PersonRepository):
        self._person_repo = person_repository

    @classmethod
    def from_factory(cls, factory: RepositoryFactory) -> DeletePersonCommand:
        return cls(person_repository=factory.person_repository())

    async def execute(self, person_id: UUID) -> None:
        deleted = await self._person_repo.delete(person_id)
        if not deleted:
            raise PersonNotFoundError(person_id)
        logger.info("Person deleted: %s", person_id)
