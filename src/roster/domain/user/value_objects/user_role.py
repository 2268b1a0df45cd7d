from enum import Enum


class UserRole(str, Enum):
    """Access level of an authenticated user."""

    USER = "User"
    ADMIN = "Admin"
