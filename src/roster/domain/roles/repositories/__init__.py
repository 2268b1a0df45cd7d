from roster.domain.roles.repositories.role_repository import RoleRepository

__all__ = ["RoleRepository"]
