"""Value types passed between the auth services and their callers."""

from dataclasses import dataclass
from datetime import datetime, timedelta
from uuid import UUID

ACCESS_TOKEN = "access"
REFRESH_TOKEN = "refresh"


@dataclass(frozen=True)
class TokenPayload:
    """Claims of a JWT that passed signature and expiry checks."""

    user_id: UUID
    email: str
    role: str
    token_type: str
    jti: str
    exp: datetime

    def is_access_token(self) -> bool:
        return self.token_type == ACCESS_TOKEN

    def is_refresh_token(self) -> bool:
        return self.token_type == REFRESH_TOKEN


@dataclass(frozen=True)
class LockoutPolicy:
    """How many wrong passwords in a row lock an account, and for how long."""

    max_failed_attempts: int = 5
    duration: timedelta = timedelta(minutes=15)

    def locked_until(self, failed_attempts: int, now: datetime) -> datetime | None:
        if failed_attempts < self.max_failed_attempts:
            return None
        return now + self.duration
