"""Repository factory protocol for application layer."""

from __future__ import annotations

from typing import Any, Protocol

from roster.application.ports import DatabaseMaintenancePort
from roster.domain.people import PersonRepository
from roster.domain.roles import RoleRepository
from roster.domain.user import UserRepository
from roster_auth.repositories import RefreshTokenRepository, UserCredentialRepository


class RepositoryFactory(Protocol):
    """Protocol for creating repositories bound to one unit of work."""

    @property
    def session(self) -> Any:
        """Get the database session for transaction management.

        The type is intentionally `Any` to avoid coupling the
        application layer to specific database implementations.
        Use this for commit/rollback at the presentation layer.
        """
        ...

    def person_repository(self) -> PersonRepository:
        """Get person repository."""
        ...

    def role_repository(self) -> RoleRepository:
        """Get role repository."""
        ...

    def user_repository(self) -> UserRepository:
        """Get user repository."""
        ...

    def credential_repository(self) -> UserCredentialRepository:
        """Get user credential repository."""
        ...

    def refresh_token_repository(self) -> RefreshTokenRepository:
        """Get refresh token repository."""
        ...

    def database_maintenance_port(self) -> DatabaseMaintenancePort:
        """Get database maintenance port."""
        ...
