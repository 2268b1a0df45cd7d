"""Person repository interface."""

from abc import ABC, abstractmethod
from typing import List, Optional
from uuid import UUID

from roster.domain.people.person import Person


class PersonRepository(ABC):
    """Repository interface for Person entities (roles are loaded eagerly)."""

    @abstractmethod
    async def find_all(self) -> List[Person]:
        """Return all people ordered by full name."""

    @abstractmethod
    async def find_by_id(self, person_id: UUID) -> Optional[Person]:
        """
        Find a person by ID.

        Parameters
        ----------
        person_id
            The person's unique identifier

        Returns
        -------
        Person with its roles if found, None otherwise
        """

    @abstractmethod
    async def save(self, person: Person) -> None:
        """
        Insert or update a person and its role assignments.

        The role assignments stored for the person are replaced by
        ``person.roles``.
        """

    @abstractmethod
    async def delete(self, person_id: UUID) -> bool:
        """
        Delete a person.

        Returns
        -------
        True if a person was deleted, False if none existed
        """

    @abstractmethod
    async def count(self) -> int:
        """Return the number of stored people."""

    @abstractmethod
    async def search_by_name(self, fragment: str) -> List[Person]:
        """People whose full name contains ``fragment``, ignoring case."""

    @abstractmethod
    async def find_by_role_name(self, role_name: str) -> List[Person]:
        """People holding the role called exactly ``role_name``."""

    @abstractmethod
    async def exists_with_role_name(self, role_name: str) -> bool:
        pass
