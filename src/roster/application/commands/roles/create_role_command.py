"""Create a role, reusing an existing one with the same name."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

from roster.domain.roles import Role, RoleRepository

if TYPE_CHECKING:
    from roster.application.factories import RepositoryFactory

logger = logging.getLogger(__name__)


@dataclass
class CreateRoleResult:
    """Outcome of a create request."""

    role: Role
    created: bool


class CreateRoleCommand:
    """
    Create a role.

    Creation is idempotent by name: when a role with the same name already
    exists it is returned unchanged and nothing is written.
    """

    def __init__(self, role_repository: RoleRepository):
        self._role_repo = role_repository

    @classmethod
    def from_factory(cls, factory: RepositoryFactory) -> CreateRoleCommand:
        return cls(role_repository=factory.role_repository())

    async def execute(
        self,
        name: str,
        description: Optional[str] = None,
    ) -> CreateRoleResult:
        # Validates name and description before any lookup
        candidate = Role.create(name=name, description=description)

        existing = await self._role_repo.find_by_name(candidate.name)
        if existing is not None:
            logger.debug("Role '%s' already exists: %s", existing.name, existing.id)
            return CreateRoleResult(role=existing, created=False)

        await self._role_repo.save(candidate)
        logger.info("Role created: %s (%s)", candidate.name, candidate.id)
        return CreateRoleResult(role=candidate, created=True)
