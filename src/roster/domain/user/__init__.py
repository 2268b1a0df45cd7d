"""User domain."""

from roster.domain.user.exceptions import (
    EmailAlreadyExistsError,
    InvalidEmailError,
    UserNotFoundError,
)
from roster.domain.user.repositories import UserRepository
from roster.domain.user.user import User
from roster.domain.user.value_objects import Email, UserRole

__all__ = [
    "Email",
    "EmailAlreadyExistsError",
    "InvalidEmailError",
    "User",
    "UserNotFoundError",
    "UserRepository",
    "UserRole",
]
