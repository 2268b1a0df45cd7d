"""Role domain exceptions."""

from uuid import UUID

from roster.domain.shared.exceptions import (
    ConflictError,
    EntityNotFoundError,
    ErrorCode,
    ValidationError,
)


class InvalidRoleNameError(ValidationError):
    """Raised when a role name is blank or too long."""

    def __init__(self, message: str) -> None:
        super().__init__(message=message, code=ErrorCode.INVALID_ROLE_NAME)


class InvalidRoleDescriptionError(ValidationError):
    """Raised when a role description exceeds its maximum length."""

    def __init__(self, message: str) -> None:
        super().__init__(message=message, code=ErrorCode.INVALID_DESCRIPTION)


class RoleNotFoundError(EntityNotFoundError):
    """Raised when a role cannot be found."""

    def __init__(self, role_id: UUID | str) -> None:
        super().__init__(
            message=f"Role with ID {role_id} not found",
            code=ErrorCode.ROLE_NOT_FOUND,
            details={"role_id": str(role_id)},
        )


class DuplicateRoleNameError(ConflictError):
    """Raised when another role already uses the requested name."""

    def __init__(self, name: str) -> None:
        super().__init__(
            message=f"Role with name '{name}' already exists",
            code=ErrorCode.DUPLICATE_ROLE_NAME,
            details={"name": name},
        )
