"""Read queries for roles."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, List, Optional
from uuid import UUID

from roster.domain.roles import Role, RoleNotFoundError, RoleRepository

if TYPE_CHECKING:
    from roster.application.factories import RepositoryFactory


@dataclass
class RoleListResult:
    """All roles plus the newest modification time, for cache validators."""

    roles: List[Role]
    last_modified: Optional[datetime]


class ListRolesQuery:
    """Query to list all roles ordered by name."""

    def __init__(self, role_repository: RoleRepository):
        self._role_repo = role_repository

    @classmethod
    def from_factory(cls, factory: RepositoryFactory) -> ListRolesQuery:
        return cls(role_repository=factory.role_repository())

    async def execute(self) -> RoleListResult:
        roles = await self._role_repo.find_all()
        last_modified = max((role.updated_at for role in roles), default=None)
        return RoleListResult(roles=roles, last_modified=last_modified)


class GetRoleQuery:
    """Query to load a single role."""

    def __init__(self, role_repository: RoleRepository):
        self._role_repo = role_repository

    @classmethod
    def from_factory(cls, factory: RepositoryFactory) -> GetRoleQuery:
        return cls(role_repository=factory.role_repository())

    async def execute(self, role_id: UUID) -> Role:
        role = await self._role_repo.find_by_id(role_id)
        if role is None:
            raise RoleNotFoundError(role_id)
        return role
