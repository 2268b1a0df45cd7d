"""Delete a role and detach it from every person."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING
from uuid import UUID

from roster.domain.roles import RoleNotFoundError, RoleRepository

if TYPE_CHECKING:
    from roster.application.factories import RepositoryFactory

logger = logging.getLogger(__name__)


class DeleteRoleCommand:
    def __init__(self, role_repository: RoleRepository):
        self._role_repo = role_repository

    @classmethod
    def from_factory(cls, factory: RepositoryFactory) -> DeleteRoleCommand:
        return cls(role_repository=factory.role_repository())

    async def execute(self, role_id: UUID) -> None:
        deleted = await self._role_repo.delete(role_id)
        if not deleted:
            raise RoleNotFoundError(role_id)
        logger.info("Role deleted: %s", role_id)
