from roster.infrastructure.persistence.sqlalchemy.repositories.factory import (
    SQLAlchemyRepositoryFactory,
)
from roster.infrastructure.persistence.sqlalchemy.repositories.person_repository import (  # NOQA: E501
    PersonRepositorySQLAlchemy,
)
from roster.infrastructure.persistence.sqlalchemy.repositories.role_repository import (  # NOQA: E501
    RoleRepositorySQLAlchemy,
)
from roster.infrastructure.persistence.sqlalchemy.repositories.user_repository import (  # NOQA: E501
    UserRepositorySQLAlchemy,
)

__all__ = [
    "PersonRepositorySQLAlchemy",
    "RoleRepositorySQLAlchemy",
    "SQLAlchemyRepositoryFactory",
    "UserRepositorySQLAlchemy",
]
