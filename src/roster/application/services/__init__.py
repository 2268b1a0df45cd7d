"""Application services."""

from roster.application.services.authentication_service import (
    AuthenticationService,
    hash_refresh_token,
)
from roster.application.services.database_maintenance_service import (
    DEFAULT_PEOPLE,
    DEFAULT_ROLES,
    DatabaseMaintenanceService,
    DatabaseStatus,
    ResetResult,
    SeedResult,
)

__all__ = [
    "AuthenticationService",
    "DEFAULT_PEOPLE",
    "DEFAULT_ROLES",
    "DatabaseMaintenanceService",
    "DatabaseStatus",
    "ResetResult",
    "SeedResult",
    "hash_refresh_token",
]
