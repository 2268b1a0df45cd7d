"""Role commands."""

from roster.application.commands.roles.create_role_command import (
    CreateRoleCommand,
    CreateRoleResult,
)
from roster.application.commands.roles.delete_role_command import DeleteRoleCommand
from roster.application.commands.roles.update_role_command import UpdateRoleCommand

__all__ = [
    "CreateRoleCommand",
    "CreateRoleResult",
    "DeleteRoleCommand",
    "UpdateRoleCommand",
]
