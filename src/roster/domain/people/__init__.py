"""People domain."""

from roster.domain.people.exceptions import (
    InvalidFullNameError,
    InvalidPhoneError,
    InvalidRoleReferenceError,
    PersonNotFoundError,
)
from roster.domain.people.person import Person
from roster.domain.people.repositories import PersonRepository

__all__ = [
    "InvalidFullNameError",
    "InvalidPhoneError",
    "InvalidRoleReferenceError",
    "Person",
    "PersonNotFoundError",
    "PersonRepository",
]
