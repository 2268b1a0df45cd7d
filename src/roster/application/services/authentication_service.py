"""Sign-up, sign-in, token rotation and sign-out for API users."""

from __future__ import annotations

import hashlib
import logging
from typing import TYPE_CHECKING
from uuid import UUID

from roster.domain.shared.time import utc_now
from roster.domain.user import EmailAlreadyExistsError, User, UserRole
from roster_auth import (
    AccountLockedError,
    InvalidCredentialsError,
    InvalidRefreshTokenError,
    InvalidTokenError,
    JWTService,
    LockoutPolicy,
    PasswordHashingService,
    TokenPayload,
)
from roster_auth.repositories import RefreshTokenRepository, UserCredentialRepository

if TYPE_CHECKING:
    from roster.application.factories import RepositoryFactory
    from roster.domain.user import UserRepository

logger = logging.getLogger(__name__)


def hash_refresh_token(token: str) -> str:
    """Digest under which a refresh token is stored."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


class AuthenticationService:
    """
    Ties the ``roster_auth`` building blocks to the ``User`` entity.

    Passwords are checked against the credential store, failed attempts
    are counted under ``lockout``, and every refresh token handed out is
    recorded by digest so it can be rotated or revoked later.
    """

    def __init__(  # NOQA: PLR0913
        self,
        user_repository: UserRepository,
        credential_repository: UserCredentialRepository,
        refresh_token_repository: RefreshTokenRepository,
        password_service: PasswordHashingService,
        jwt_service: JWTService,
        lockout: LockoutPolicy | None = None,
    ):
        self._user_repo = user_repository
        self._credential_repo = credential_repository
        self._refresh_repo = refresh_token_repository
        self._password_service = password_service
        self._jwt_service = jwt_service
        self._lockout = lockout or LockoutPolicy()

    @classmethod
    def from_factory(
        cls,
        factory: RepositoryFactory,
        password_service: PasswordHashingService,
        jwt_service: JWTService,
        lockout: LockoutPolicy | None = None,
    ) -> AuthenticationService:
        return cls(
            user_repository=factory.user_repository(),
            credential_repository=factory.credential_repository(),
            refresh_token_repository=factory.refresh_token_repository(),
            password_service=password_service,
            jwt_service=jwt_service,
            lockout=lockout,
        )

    async def _issue_token_pair(self, user: User) -> tuple[str, str]:
        access_token = self._jwt_service.create_access_token(
            user_id=user.id,
            email=user.email,
            role=user.role.value,
        )
        refresh_token = self._jwt_service.create_refresh_token(
            user_id=user.id,
            email=user.email,
            role=user.role.value,
        )
        await self._refresh_repo.save(
            user_id=user.id,
            token_hash=hash_refresh_token(refresh_token),
            expires_at=utc_now() + self._jwt_service.refresh_token_lifetime,
        )
        return access_token, refresh_token

    async def register(
        self,
        email: str,
        password: str,
        first_name: str = "",
        last_name: str = "",
    ) -> tuple[User, str, str]:
        """Create a user with a password; the first user ever becomes admin."""
        if await self._user_repo.find_by_email(email) is not None:
            raise EmailAlreadyExistsError(email)

        # Hashing validates strength before anything is stored
        password_hash = self._password_service.hash(password)
        is_first = await self._user_repo.count() == 0
        user = User.create(
            email,
            first_name=first_name,
            last_name=last_name,
            role=UserRole.ADMIN if is_first else UserRole.USER,
        )
        await self._user_repo.save(user)
        await self._credential_repo.save(user.id, password_hash)

        tokens = await self._issue_token_pair(user)
        logger.info("Registered %s as %s", user.email, user.role.value)
        return user, *tokens

    async def login(
        self,
        email: str,
        password: str,
    ) -> tuple[User, str, str]:
        user = await self._user_repo.find_by_email(email)
        if user is None:
            raise InvalidCredentialsError

        credential = await self._credential_repo.find_by_user_id(user.id)
        if credential is None:
            raise InvalidCredentialsError
        if credential.is_locked(utc_now()):
            raise AccountLockedError(locked_until=credential.locked_until)

        if not self._password_service.verify(password, credential.password_hash):
            counted = await self._credential_repo.record_failed_login(
                user.id,
                self._lockout,
            )
            attempts = counted.failed_login_attempts if counted else 0
            logger.warning("Failed login for %s (attempt %d)", user.email, attempts)
            raise InvalidCredentialsError

        await self._credential_repo.record_successful_login(user.id)

        tokens = await self._issue_token_pair(user)
        logger.info("Signed in %s", user.email)
        return user, *tokens

    async def refresh_token(self, refresh_token: str) -> tuple[User, str, str]:
        """
        Exchange a refresh token for a new token pair.

        The presented token is revoked. Presenting an already revoked token
        revokes every token of its user, since it indicates token theft.
        """
        payload = self._jwt_service.verify_token(refresh_token)

        if not payload.is_refresh_token():
            msg = "Not a refresh token"
            raise InvalidTokenError(msg)

        token_hash = hash_refresh_token(refresh_token)
        stored = await self._refresh_repo.find_by_hash(token_hash)
        if stored is None:
            raise InvalidRefreshTokenError
        if stored.is_revoked:
            revoked = await self._refresh_repo.revoke_all_for_user(payload.user_id)
            logger.warning(
                "Revoked refresh token reused for user %s; revoked %d token(s)",
                payload.user_id,
                revoked,
            )
            raise InvalidRefreshTokenError
        if stored.expires_at <= utc_now():
            msg = "Refresh token has expired"
            raise InvalidRefreshTokenError(msg)

        user = await self._user_repo.find_by_id(payload.user_id)
        if user is None:
            msg = "User not found"
            raise InvalidTokenError(msg)

        await self._refresh_repo.revoke(token_hash)
        new_access_token, new_refresh_token = await self._issue_token_pair(user)

        logger.debug("Tokens refreshed for user: %s", user.email)
        return user, new_access_token, new_refresh_token

    async def logout(self, user_id: UUID) -> int:
        revoked = await self._refresh_repo.revoke_all_for_user(user_id)
        logger.info("User logged out: %s", user_id)
        return revoked

    def verify_token(self, token: str) -> TokenPayload:
        return self._jwt_service.verify_token(token)
