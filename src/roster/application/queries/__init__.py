"""Application queries (read operations)."""

from roster.application.queries.people import (
    CountPeopleQuery,
    FindPeopleByRoleQuery,
    GetPersonQuery,
    HasPeopleWithRoleQuery,
    ListPeopleQuery,
    SearchPeopleByNameQuery,
)
from roster.application.queries.roles import (
    GetRoleQuery,
    ListRolesQuery,
    RoleListResult,
)

__all__ = [
    "CountPeopleQuery",
    "FindPeopleByRoleQuery",
    "GetPersonQuery",
    "GetRoleQuery",
    "HasPeopleWithRoleQuery",
    "ListPeopleQuery",
    "ListRolesQuery",
    "RoleListResult",
    "SearchPeopleByNameQuery",
]
