"""Signing and checking of HS256 JSON Web Tokens."""

from datetime import datetime, timedelta, timezone
from uuid import UUID, uuid4

import jwt

from roster_auth.exceptions import InvalidTokenError
from roster_auth.schemas import ACCESS_TOKEN, REFRESH_TOKEN, TokenPayload

REQUIRED_CLAIMS = ["sub", "email", "exp"]


class JWTService:
    """
    Issues access and refresh tokens for a user and verifies them.

    Both kinds share one secret and differ in their ``type`` claim and
    lifetime. Each token gets a random ``jti``, so two tokens minted for
    the same user within one second still differ.

    Examples
    --------
    >>> service = JWTService(secret_key="change-me")
    >>> token = service.create_access_token(user_id, "ada@example.com", "Admin")
    >>> service.verify_token(token).role
    'Admin'
    """

    ALGORITHM = "HS256"

    def __init__(
        self,
        secret_key: str,
        access_token_expire_minutes: int = 15,
        refresh_token_expire_days: int = 7,
    ):
        if not secret_key:
            msg = "JWT secret key cannot be empty"
            raise ValueError(msg)
        self._secret_key = secret_key
        self._lifetimes = {
            ACCESS_TOKEN: timedelta(minutes=access_token_expire_minutes),
            REFRESH_TOKEN: timedelta(days=refresh_token_expire_days),
        }

    @property
    def access_token_lifetime(self) -> timedelta:
        return self._lifetimes[ACCESS_TOKEN]

    @property
    def refresh_token_lifetime(self) -> timedelta:
        return self._lifetimes[REFRESH_TOKEN]

    def create_access_token(
        self,
        user_id: UUID,
        email: str,
        role: str,
        expires_delta: timedelta | None = None,
    ) -> str:
        return self._sign(user_id, email, role, ACCESS_TOKEN, expires_delta)

    def create_refresh_token(
        self,
        user_id: UUID,
        email: str,
        role: str,
        expires_delta: timedelta | None = None,
    ) -> str:
        return self._sign(user_id, email, role, REFRESH_TOKEN, expires_delta)

    def verify_token(self, token: str) -> TokenPayload:
        """
        Check signature and expiry of ``token`` and return its claims.

        Raises
        ------
        InvalidTokenError
            If the token is expired, forged, malformed or lacks a claim
        """
        try:
            claims = jwt.decode(
                token,
                self._secret_key,
                algorithms=[self.ALGORITHM],
                options={"require": REQUIRED_CLAIMS},
            )
            return TokenPayload(
                user_id=UUID(claims["sub"]),
                email=claims["email"],
                role=claims.get("role", "User"),
                token_type=claims.get("type", ACCESS_TOKEN),
                jti=claims.get("jti", ""),
                exp=datetime.fromtimestamp(claims["exp"], tz=timezone.utc),
            )
        except jwt.ExpiredSignatureError as e:
            raise InvalidTokenError("Token has expired") from e
        except jwt.PyJWTError as e:
            raise InvalidTokenError(f"Invalid token: {e}") from e
        except ValueError as e:
            raise InvalidTokenError(f"Malformed token subject: {e}") from e

    def _sign(  # NOQA: PLR0913
        self,
        user_id: UUID,
        email: str,
        role: str,
        token_type: str,
        expires_delta: timedelta | None,
    ) -> str:
        issued_at = datetime.now(tz=timezone.utc)
        lifetime = expires_delta or self._lifetimes[token_type]
        claims = {
            "sub": str(user_id),
            "email": email,
            "role": role,
            "type": token_type,
            "jti": uuid4().hex,
            "iat": issued_at,
            "exp": issued_at + lifetime,
        }
        return jwt.encode(claims, self._secret_key, algorithm=self.ALGORITHM)
