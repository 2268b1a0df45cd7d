"""Rename a role or change its description."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional
from uuid import UUID

from roster.domain.roles import (
    DuplicateRoleNameError,
    Role,
    RoleNotFoundError,
    RoleRepository,
)
from roster.domain.shared.exceptions import ConcurrencyError

if TYPE_CHECKING:
    from roster.application.factories import RepositoryFactory

logger = logging.getLogger(__name__)


class UpdateRoleCommand:
    """Update a role. Names stay unique across all roles."""

    def __init__(self, role_repository: RoleRepository):
        self._role_repo = role_repository

    @classmethod
    def from_factory(cls, factory: RepositoryFactory) -> UpdateRoleCommand:
        return cls(role_repository=factory.role_repository())

    async def execute(
        self,
        role_id: UUID,
        name: str,
        description: Optional[str] = None,
        row_version: Optional[int] = None,
    ) -> Role:
        role = await self._role_repo.find_by_id(role_id)
        if role is None:
            raise RoleNotFoundError(role_id)

        if row_version is not None and row_version != role.row_version:
            raise ConcurrencyError(
                details={
                    "role_id": str(role_id),
                    "expected_row_version": row_version,
                    "actual_row_version": role.row_version,
                },
            )

        new_name = name.strip() if name else name
        if new_name and new_name != role.name:
            await self._ensure_name_available(new_name, role.id)

        role.update(name=name, description=description)
        await self._role_repo.save(role)

        logger.info("Role updated: %s (%s)", role.name, role.id)
        return role

    async def _ensure_name_available(self, name: str, role_id: UUID) -> None:
        existing = await self._role_repo.find_by_name(name)
        if existing is not None and existing.id != role_id:
            raise DuplicateRoleNameError(name)
