"""Read queries for people."""

from __future__ import annotations

from typing import TYPE_CHECKING, List
from uuid import UUID

from roster.domain.people import Person, PersonNotFoundError, PersonRepository
from roster.domain.shared import ValidationError

if TYPE_CHECKING:
    from roster.application.factories import RepositoryFactory


class ListPeopleQuery:
    """Query to list all people with their roles, ordered by name."""

    def __init__(self, person_repository: PersonRepository):
        self._person_repo = person_repository

    @classmethod
    def from_factory(cls, factory: RepositoryFactory) -> ListPeopleQuery:
        return cls(person_repository=factory.person_repository())

    async def execute(self) -> List[Person]:
        return await self._person_repo.find_all()


class GetPersonQuery:
    """Query to load a single person."""

    def __init__(self, person_repository: PersonRepository):
        self._person_repo = person_repository

    @classmethod
    def from_factory(cls, factory: RepositoryFactory) -> GetPersonQuery:
        return cls(person_repository=factory.person_repository())

    async def execute(self, person_id: UUID) -> Person:
        person = await self._person_repo.find_by_id(person_id)
        if person is None:
            raise PersonNotFoundError(person_id)
        return person


def _required(value: str | None, parameter: str) -> str:
    if value is None or not value.strip():
        raise ValidationError(
            f"{parameter} parameter is required",
            details={"parameter": parameter},
        )
    return value.strip()


class SearchPeopleByNameQuery:
    """People whose name contains a fragment, case-insensitively."""

    def __init__(self, person_repository: PersonRepository):
        self._person_repo = person_repository

    @classmethod
    def from_factory(cls, factory: RepositoryFactory) -> SearchPeopleByNameQuery:
        return cls(person_repository=factory.person_repository())

    async def execute(self, name: str | None) -> List[Person]:
        return await self._person_repo.search_by_name(_required(name, "Name"))


class FindPeopleByRoleQuery:
    def __init__(self, person_repository: PersonRepository):
        self._person_repo = person_repository

    @classmethod
    def from_factory(cls, factory: RepositoryFactory) -> FindPeopleByRoleQuery:
        return cls(person_repository=factory.person_repository())

    async def execute(self, role_name: str | None) -> List[Person]:
        role_name = _required(role_name, "RoleName")
        return await self._person_repo.find_by_role_name(role_name)


class CountPeopleQuery:
    def __init__(self, person_repository: PersonRepository):
        self._person_repo = person_repository

    @classmethod
    def from_factory(cls, factory: RepositoryFactory) -> CountPeopleQuery:
        return cls(person_repository=factory.person_repository())

    async def execute(self) -> int:
        return await self._person_repo.count()


class HasPeopleWithRoleQuery:
    """Whether at least one person holds the named role."""

    def __init__(self, person_repository: PersonRepository):
        self._person_repo = person_repository

    @classmethod
    def from_factory(cls, factory: RepositoryFactory) -> HasPeopleWithRoleQuery:
        return cls(person_repository=factory.person_repository())

    async def execute(self, role_name: str | None) -> bool:
        role_name = _required(role_name, "RoleName")
        return await self._person_repo.exists_with_role_name(role_name)
