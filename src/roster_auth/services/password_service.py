"""Password hashing service.

Wraps bcrypt for hashing and verification, plus a minimal strength check
applied before a password is ever hashed.
"""

import bcrypt

from roster_auth.exceptions import WeakPasswordError


class PasswordHashingService:
    """Hash and verify passwords with bcrypt."""

    MIN_LENGTH = 8
    # bcrypt ignores everything past 72 bytes
    MAX_BYTES = 72
    DEFAULT_ROUNDS = 12

    def __init__(self, rounds: int = DEFAULT_ROUNDS):
        self._rounds = rounds

    def validate_strength(self, password: str) -> None:
        """
        Ensure the password meets the minimum requirements.

        Raises
        ------
        WeakPasswordError
            If the password is too short, too long, or lacks a letter or digit
        """
        if len(password) < self.MIN_LENGTH:
            msg = f"Password must be at least {self.MIN_LENGTH} characters long"
            raise WeakPasswordError(msg)
        if len(password.encode("utf-8")) > self.MAX_BYTES:
            msg = f"Password must not exceed {self.MAX_BYTES} bytes"
            raise WeakPasswordError(msg)
        if not any(c.isalpha() for c in password):
            msg = "Password must contain at least one letter"
            raise WeakPasswordError(msg)
        if not any(c.isdigit() for c in password):
            msg = "Password must contain at least one digit"
            raise WeakPasswordError(msg)

    def hash(self, password: str) -> str:
        """Validate and hash a password."""
        self.validate_strength(password)
        salt = bcrypt.gensalt(rounds=self._rounds)
        return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")

    def verify(self, password: str, password_hash: str) -> bool:
        """Check a password against a stored hash. Malformed hashes never match."""
        try:
            return bcrypt.checkpw(
                password.encode("utf-8"),
                password_hash.encode("utf-8"),
            )
        except ValueError:
            return False
