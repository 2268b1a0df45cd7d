"""Resolve role IDs submitted with a person into Role entities."""

from typing import Iterable, List
from uuid import UUID

from roster.domain.people import InvalidRoleReferenceError
from roster.domain.roles import Role, RoleRepository


async def resolve_roles(
    role_repository: RoleRepository,
    role_ids: Iterable[UUID] | None,
) -> List[Role]:
    """
    Load the roles for the given IDs.

    Raises
    ------
    InvalidRoleReferenceError
        If any ID does not match a stored role
    """
    requested = set(role_ids or [])
    if not requested:
        return []

    roles = await role_repository.find_by_ids(requested)
    missing = requested - {role.id for role in roles}
    if missing:
        raise InvalidRoleReferenceError(missing)
    return roles
