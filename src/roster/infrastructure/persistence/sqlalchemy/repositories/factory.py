"""SQLAlchemy repository factory."""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession

from roster.infrastructure.persistence.sqlalchemy.adapters import (
    SqlAlchemyDatabaseMaintenanceAdapter,
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
from roster_auth.persistence.sqlalchemy import (
    RefreshTokenRepositorySQLAlchemy,
    UserCredentialRepositorySQLAlchemy,
)


class SQLAlchemyRepositoryFactory:
    """SQLAlchemy implementation of the RepositoryFactory Protocol.

    Repositories are created on first use and cached for the lifetime of
    the factory, which is one request or one CLI command.
    """

    def __init__(self, session: AsyncSession):
        self._session = session

        # Cached instances (created on demand)
        self._person_repo: PersonRepositorySQLAlchemy | None = None
        self._role_repo: RoleRepositorySQLAlchemy | None = None
        self._user_repo: UserRepositorySQLAlchemy | None = None
        self._credential_repo: UserCredentialRepositorySQLAlchemy | None = None
        self._refresh_token_repo: RefreshTokenRepositorySQLAlchemy | None = None
        self._maintenance_adapter: SqlAlchemyDatabaseMaintenanceAdapter | None = None

    @property
    def session(self) -> AsyncSession:
        return self._session

    def person_repository(self) -> PersonRepositorySQLAlchemy:
        if self._person_repo is None:
            self._person_repo = PersonRepositorySQLAlchemy(self._session)
        return self._person_repo

    def role_repository(self) -> RoleRepositorySQLAlchemy:
        if self._role_repo is None:
            self._role_repo = RoleRepositorySQLAlchemy(self._session)
        return self._role_repo

    def user_repository(self) -> UserRepositorySQLAlchemy:
        if self._user_repo is None:
            self._user_repo = UserRepositorySQLAlchemy(self._session)
        return self._user_repo

    def credential_repository(self) -> UserCredentialRepositorySQLAlchemy:
        if self._credential_repo is None:
            self._credential_repo = UserCredentialRepositorySQLAlchemy(self._session)
        return self._credential_repo

    def refresh_token_repository(self) -> RefreshTokenRepositorySQLAlchemy:
        if self._refresh_token_repo is None:
            self._refresh_token_repo = RefreshTokenRepositorySQLAlchemy(self._session)
        return self._refresh_token_repo

    def database_maintenance_port(self) -> SqlAlchemyDatabaseMaintenanceAdapter:
        if self._maintenance_adapter is None:
            self._maintenance_adapter = SqlAlchemyDatabaseMaintenanceAdapter(
                self._session,
            )
        return self._maintenance_adapter
