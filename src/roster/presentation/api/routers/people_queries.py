"""Lookups over people: name search, role filters and counts.

Public like the people router. Blank ``name``/``roleName`` parameters are
answered with 400.
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Query

from roster.application.queries import (
    CountPeopleQuery,
    FindPeopleByRoleQuery,
    GetPersonQuery,
    HasPeopleWithRoleQuery,
    SearchPeopleByNameQuery,
)
from roster.presentation.api.dependencies import RepoFactory
from roster.presentation.api.schemas.people import PersonResponse

router = APIRouter()

NameParam = Annotated[str | None, Query(description="Part of the full name")]
RoleNameParam = Annotated[
    str | None,
    Query(alias="roleName", description="Exact role name"),
]


@router.get(
    "/search",
    summary="Search people by name",
    responses={400: {"description": "Name parameter missing or blank"}},
)
async def search_by_name(
    factory: RepoFactory,
    name: NameParam = None,
) -> list[PersonResponse]:
    """Case-insensitive substring match, e.g. `?name=john`."""
    people = await SearchPeopleByNameQuery.from_factory(factory).execute(name)
    return [PersonResponse.from_domain(person) for person in people]


@router.get(
    "/by-role",
    summary="People holding a role",
    responses={400: {"description": "RoleName parameter missing or blank"}},
)
async def find_by_role(
    factory: RepoFactory,
    role_name: RoleNameParam = None,
) -> list[PersonResponse]:
    people = await FindPeopleByRoleQuery.from_factory(factory).execute(role_name)
    return [PersonResponse.from_domain(person) for person in people]


@router.get(
    "/count",
    summary="Number of people",
)
async def count_people(factory: RepoFactory) -> int:
    return await CountPeopleQuery.from_factory(factory).execute()


@router.get(
    "/has-role",
    summary="Whether anyone holds a role",
    responses={400: {"description": "RoleName parameter missing or blank"}},
)
async def has_role(
    factory: RepoFactory,
    role_name: RoleNameParam = None,
) -> bool:
    return await HasPeopleWithRoleQuery.from_factory(factory).execute(role_name)


@router.get(
    "/{person_id}/with-roles",
    summary="Person with roles",
    responses={404: {"description": "Person not found"}},
)
async def get_with_roles(person_id: UUID, factory: RepoFactory) -> PersonResponse:
    person = await GetPersonQuery.from_factory(factory).execute(person_id)
    return PersonResponse.from_domain(person)
