"""Value objects for the user domain."""

from roster.domain.user.value_objects.email import Email
from roster.domain.user.value_objects.user_role import UserRole

__all__ = ["Email", "UserRole"]
