"""Base errors of the domain layer.

Every domain error carries a message that is safe to show to API clients
and an ``ErrorCode`` that clients can branch on. ``details`` is logged by
the API but never returned.
"""

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Machine readable error codes returned as ``code`` in error bodies."""

    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_EMAIL = "INVALID_EMAIL"
    INVALID_FULL_NAME = "INVALID_FULL_NAME"
    INVALID_PHONE = "INVALID_PHONE"
    INVALID_ROLE_NAME = "INVALID_ROLE_NAME"
    INVALID_DESCRIPTION = "INVALID_DESCRIPTION"
    INVALID_ROLE_REFERENCE = "INVALID_ROLE_REFERENCE"

    ENTITY_NOT_FOUND = "ENTITY_NOT_FOUND"
    PERSON_NOT_FOUND = "PERSON_NOT_FOUND"
    ROLE_NOT_FOUND = "ROLE_NOT_FOUND"
    USER_NOT_FOUND = "USER_NOT_FOUND"

    CONFLICT = "CONFLICT"
    DUPLICATE_ROLE_NAME = "DUPLICATE_ROLE_NAME"
    EMAIL_ALREADY_EXISTS = "EMAIL_ALREADY_EXISTS"
    CONCURRENCY_CONFLICT = "CONCURRENCY_CONFLICT"

    INTERNAL_ERROR = "INTERNAL_ERROR"


class DomainException(Exception):  # NOQA: N818
    default_code = ErrorCode.INTERNAL_ERROR

    def __init__(
        self,
        message: str,
        code: ErrorCode | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.details = details or {}

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        name = type(self).__name__
        return f"{name}({self.message!r}, code={self.code.value}, {self.details!r})"


class ValidationError(DomainException):
    """Input that breaks a rule of a value object or entity."""

    default_code = ErrorCode.VALIDATION_ERROR


class EntityNotFoundError(DomainException):
    default_code = ErrorCode.ENTITY_NOT_FOUND


class ConflictError(DomainException):
    """The change clashes with data that is already stored."""

    default_code = ErrorCode.CONFLICT


class ConcurrencyError(ConflictError):
    """The stored row changed since the client last read it."""

    default_code = ErrorCode.CONCURRENCY_CONFLICT

    def __init__(
        self,
        message: str = "The resource was modified by another request",
        code: ErrorCode | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, code, details)
