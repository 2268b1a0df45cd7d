"""Test-support maintenance of the People/Roles data set.

Used by the end-to-end test tooling to bring a worker's database into a
known state between tests.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Optional

from roster.domain.people import Person, PersonRepository
from roster.domain.roles import Role, RoleRepository
from roster.domain.shared.time import utc_now

if TYPE_CHECKING:
    from roster.application.factories import RepositoryFactory
    from roster.application.ports import DatabaseMaintenancePort

logger = logging.getLogger(__name__)

DEFAULT_ROLES: tuple[tuple[str, str], ...] = (
    ("Administrator", "System administrator with full access"),
    ("User", "Standard user with limited access"),
    ("Guest", "Guest user with read-only access"),
)

DEFAULT_PEOPLE: tuple[str, ...] = ("John Doe", "Jane Smith")


@dataclass
class ResetResult:
    worker_index: int
    deleted: dict[str, int]
    duration_ms: float
    timestamp: datetime = field(default_factory=utc_now)


@dataclass
class SeedResult:
    worker_index: int
    roles_created: int
    people_created: int
    timestamp: datetime = field(default_factory=utc_now)


@dataclass
class DatabaseStatus:
    environment: str
    database: Optional[str]
    can_connect: bool
    people_count: int
    roles_count: int
    users_count: int
    timestamp: datetime = field(default_factory=utc_now)


class DatabaseMaintenanceService:
    """Reset, seed and inspect the database behind one API process."""

    def __init__(
        self,
        maintenance_port: DatabaseMaintenancePort,
        person_repository: PersonRepository,
        role_repository: RoleRepository,
        environment: str,
        database_location: Optional[str] = None,
    ):
        self._port = maintenance_port
        self._person_repo = person_repository
        self._role_repo = role_repository
        self._environment = environment
        self._database_location = database_location

    @classmethod
    def from_factory(
        cls,
        factory: RepositoryFactory,
        environment: str,
        database_location: Optional[str] = None,
    ) -> DatabaseMaintenanceService:
        return cls(
            maintenance_port=factory.database_maintenance_port(),
            person_repository=factory.person_repository(),
            role_repository=factory.role_repository(),
            environment=environment,
            database_location=database_location,
        )

    async def reset(self, worker_index: int) -> ResetResult:
        """Delete all people, roles and role assignments. Users are kept."""
        started = time.perf_counter()
        deleted = await self._port.delete_people_and_roles()
        duration_ms = (time.perf_counter() - started) * 1000

        logger.info(
            "Database reset for worker %d in %.1fms (%s)",
            worker_index,
            duration_ms,
            ", ".join(f"{name}={count}" for name, count in deleted.items()),
        )
        return ResetResult(
            worker_index=worker_index,
            deleted=deleted,
            duration_ms=duration_ms,
        )

    async def seed(self, worker_index: int) -> SeedResult:
        """Insert the default roles and people into empty tables."""
        roles_created = 0
        if await self._role_repo.count() == 0:
            for name, description in DEFAULT_ROLES:
                await self._role_repo.save(Role.create(name, description))
            roles_created = len(DEFAULT_ROLES)

        people_created = 0
        if await self._person_repo.count() == 0:
            for full_name in DEFAULT_PEOPLE:
                await self._person_repo.save(Person.create(full_name))
            people_created = len(DEFAULT_PEOPLE)

        logger.info(
            "Database seeded for worker %d: %d role(s), %d person(s)",
            worker_index,
            roles_created,
            people_created,
        )
        return SeedResult(
            worker_index=worker_index,
            roles_created=roles_created,
            people_created=people_created,
        )

    async def status(self) -> DatabaseStatus:
        can_connect = await self._port.can_connect()
        counts = await self._port.table_counts() if can_connect else {}
        return DatabaseStatus(
            environment=self._environment,
            database=self._database_location,
            can_connect=can_connect,
            people_count=counts.get("people", 0),
            roles_count=counts.get("roles", 0),
            users_count=counts.get("users", 0),
        )
