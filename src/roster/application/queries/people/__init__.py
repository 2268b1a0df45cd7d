from roster.application.queries.people.people_queries import (
    CountPeopleQuery,
    FindPeopleByRoleQuery,
    GetPersonQuery,
    HasPeopleWithRoleQuery,
    ListPeopleQuery,
    SearchPeopleByNameQuery,
)

__all__ = [
    "CountPeopleQuery",
    "FindPeopleByRoleQuery",
    "GetPersonQuery",
    "HasPeopleWithRoleQuery",
    "ListPeopleQuery",
    "SearchPeopleByNameQuery",
]
