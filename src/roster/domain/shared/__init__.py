from roster.domain.shared.exceptions import (
    ConcurrencyError,
    ConflictError,
    DomainException,
    EntityNotFoundError,
    ErrorCode,
    ValidationError,
)
from roster.domain.shared.time import ensure_tz_aware, utc_now

__all__ = [
    "ConcurrencyError",
    "ConflictError",
    "DomainException",
    "EntityNotFoundError",
    "ErrorCode",
    "ValidationError",
    "ensure_tz_aware",
    "utc_now",
]
