from roster.application.queries.roles.role_queries import (
    GetRoleQuery,
    ListRolesQuery,
    RoleListResult,
)

__all__ = ["GetRoleQuery", "ListRolesQuery", "RoleListResult"]
