"""Errors of the authentication package.

None of them knows about HTTP; the auth router turns them into 401 and
423 responses.
"""

from datetime import datetime


class AuthError(Exception):
    default_message = "Authentication error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidTokenError(AuthError):
    """A JWT that is malformed, forged, expired or of the wrong type."""

    default_message = "Invalid or expired token"


class InvalidRefreshTokenError(AuthError):
    """A refresh token that is unknown, revoked or expired in storage."""

    default_message = "Invalid refresh token"


class WeakPasswordError(AuthError):
    default_message = "Password does not meet requirements"


class InvalidCredentialsError(AuthError):
    """Wrong password or unknown email; the two are not told apart."""

    default_message = "Invalid email or password"


class AccountLockedError(AuthError):
    default_message = "Account is locked due to too many failed login attempts"

    def __init__(self, locked_until: datetime | None = None):
        self.locked_until = locked_until
        message = self.default_message
        if locked_until is not None:
            message = f"{message}. Try again after {locked_until.isoformat()}"
        super().__init__(message)
