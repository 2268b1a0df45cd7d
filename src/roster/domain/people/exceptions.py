"""People domain exceptions."""

from typing import Iterable
from uuid import UUID

from roster.domain.shared.exceptions import (
    EntityNotFoundError,
    ErrorCode,
    ValidationError,
)


class InvalidFullNameError(ValidationError):
    """Raised when a person's full name is blank, too long or malformed."""

    def __init__(self, message: str) -> None:
        super().__init__(message=message, code=ErrorCode.INVALID_FULL_NAME)


class InvalidPhoneError(ValidationError):
    """Raised when a phone number does not look like one."""

    def __init__(self, phone: str) -> None:
        super().__init__(
            message="Invalid phone number format",
            code=ErrorCode.INVALID_PHONE,
            details={"phone": phone},
        )


class PersonNotFoundError(EntityNotFoundError):
    """Raised when a person cannot be found."""

    def __init__(self, person_id: UUID | str) -> None:
        super().__init__(
            message=f"Person with ID {person_id} not found",
            code=ErrorCode.PERSON_NOT_FOUND,
            details={"person_id": str(person_id)},
        )


class InvalidRoleReferenceError(ValidationError):
    """Raised when a person references roles that do not exist."""

    def __init__(self, missing_role_ids: Iterable[UUID]) -> None:
        missing = sorted(str(role_id) for role_id in missing_role_ids)
        super().__init__(
            message="One or more role IDs are invalid",
            code=ErrorCode.INVALID_ROLE_REFERENCE,
            details={"missing_role_ids": missing},
        )
        self.missing_role_ids = missing
