"""SQLAlchemy models. Importing this package registers every table."""

from roster.infrastructure.persistence.sqlalchemy.models.base import (
    Base,
    TimestampMixin,
)
from roster.infrastructure.persistence.sqlalchemy.models.person_model import (
    PersonModel,
    person_roles,
)
from roster.infrastructure.persistence.sqlalchemy.models.role_model import RoleModel
from roster.infrastructure.persistence.sqlalchemy.models.user_model import UserModel

__all__ = [
    "Base",
    "PersonModel",
    "RoleModel",
    "TimestampMixin",
    "UserModel",
    "person_roles",
]
