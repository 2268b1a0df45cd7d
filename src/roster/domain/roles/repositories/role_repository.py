"""Role repository interface."""

from abc import ABC, abstractmethod
from typing import Iterable, List, Optional
from uuid import UUID

from roster.domain.roles.role import Role


class RoleRepository(ABC):
    """Repository interface for Role entities."""

    @abstractmethod
    async def find_all(self) -> List[Role]:
        """Return all roles ordered by name."""

    @abstractmethod
    async def find_by_id(self, role_id: UUID) -> Optional[Role]:
        """Find a role by ID."""

    @abstractmethod
    async def find_by_name(self, name: str) -> Optional[Role]:
        """Find a role by its exact name."""

    @abstractmethod
    async def find_by_ids(self, role_ids: Iterable[UUID]) -> List[Role]:
        """
        Return the roles matching the given IDs.

        Unknown IDs are silently skipped. Callers compare the result size
        against the request to detect dangling references.
        """

    @abstractmethod
    async def save(self, role: Role) -> None:
        """Insert or update a role."""

    @abstractmethod
    async def delete(self, role_id: UUID) -> bool:
        """
        Delete a role and detach it from every person.

        Returns
        -------
        True if a role was deleted, False if none existed
        """

    @abstractmethod
    async def count(self) -> int:
        """Return the number of stored roles."""
