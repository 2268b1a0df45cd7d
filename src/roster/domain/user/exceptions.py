"""User domain exceptions."""

from uuid import UUID

from roster.domain.shared.exceptions import (
    ConflictError,
    EntityNotFoundError,
    ErrorCode,
    ValidationError,
)


class InvalidEmailError(ValidationError):
    """
    Raised when email format is invalid.

    This exception is raised during Email value object creation
    when the provided string doesn't match expected email format.
    """

    def __init__(self, message: str) -> None:
        super().__init__(message=message, code=ErrorCode.INVALID_EMAIL)


class EmailAlreadyExistsError(ConflictError):
    """Email already registered."""

    def __init__(self, email: str) -> None:
        self.email = email
        super().__init__(
            message=f"Email already registered: {email}",
            code=ErrorCode.EMAIL_ALREADY_EXISTS,
        )


class UserNotFoundError(EntityNotFoundError):
    """User not found."""

    def __init__(self, user_id: UUID | str) -> None:
        self.user_id = str(user_id)
        super().__init__(
            message=f"User not found: {user_id}",
            code=ErrorCode.USER_NOT_FOUND,
        )
