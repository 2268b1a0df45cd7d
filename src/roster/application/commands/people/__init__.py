"""People commands."""

from roster.application.commands.people.create_person_command import (
    CreatePersonCommand,
)
from roster.application.commands.people.delete_person_command import (
    DeletePersonCommand,
)
from roster.application.commands.people.update_person_command import (
    UpdatePersonCommand,
)

__all__ = [
    "CreatePersonCommand",
    "DeletePersonCommand",
    "UpdatePersonCommand",
]
