"""Roles domain."""

from roster.domain.roles.exceptions import (
    DuplicateRoleNameError,
    InvalidRoleDescriptionError,
    InvalidRoleNameError,
    RoleNotFoundError,
)
from roster.domain.roles.repositories import RoleRepository
from roster.domain.roles.role import Role

__all__ = [
    "DuplicateRoleNameError",
    "InvalidRoleDescriptionError",
    "InvalidRoleNameError",
    "Role",
    "RoleNotFoundError",
    "RoleRepository",
]
