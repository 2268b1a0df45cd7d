"""Application commands (write operations)."""

from roster.application.commands.people import (
    CreatePersonCommand,
    DeletePersonCommand,
    UpdatePersonCommand,
)
from roster.application.commands.roles import (
    CreateRoleCommand,
    CreateRoleResult,
    DeleteRoleCommand,
    UpdateRoleCommand,
)

__all__ = [
    "CreatePersonCommand",
    "CreateRoleCommand",
    "CreateRoleResult",
    "DeletePersonCommand",
    "DeleteRoleCommand",
    "UpdatePersonCommand",
    "UpdateRoleCommand",
]
