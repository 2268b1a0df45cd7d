"""Request-scoped dependencies of the Roster API.

Routers declare what they need through the ``Annotated`` aliases below
(``DBSession``, ``RepoFactory``, ``AuthService``, ``CurrentUser``,
``AdminUser``, ``SettingsDep``). Application classes are built in the
routers through their ``from_factory()`` constructors.
"""

import logging
from datetime import timedelta
from typing import Annotated, AsyncGenerator

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from roster.application.services import AuthenticationService
from roster.domain.user import User
from roster.infrastructure.persistence.sqlalchemy.repositories import (
    SQLAlchemyRepositoryFactory,
)
from roster.presentation.api.config import get_api_settings, get_session_maker
from roster_auth import (
    InvalidTokenError,
    JWTService,
    LockoutPolicy,
    PasswordHashingService,
)
from roster_config.settings import Settings

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)

SettingsDep = Annotated[Settings, Depends(get_api_settings)]


async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """One session per request; routers commit explicitly."""
    async with get_session_maker(request)() as session:
        yield session


DBSession = Annotated[AsyncSession, Depends(get_db_session)]


async def get_repository_factory(session: DBSession) -> SQLAlchemyRepositoryFactory:
    return SQLAlchemyRepositoryFactory(session)


RepoFactory = Annotated[SQLAlchemyRepositoryFactory, Depends(get_repository_factory)]


def get_jwt_service(settings: SettingsDep) -> JWTService:
    return JWTService(
        secret_key=settings.jwt_secret_key.get_secret_value(),
        access_token_expire_minutes=settings.jwt_access_token_expire_minutes,
        refresh_token_expire_days=settings.jwt_refresh_token_expire_days,
    )


def get_password_service() -> PasswordHashingService:
    return PasswordHashingService()


JWTServiceDep = Annotated[JWTService, Depends(get_jwt_service)]
PasswordServiceDep = Annotated[PasswordHashingService, Depends(get_password_service)]


async def get_authentication_service(
    factory: RepoFactory,
    settings: SettingsDep,
    jwt_service: JWTServiceDep,
    password_service: PasswordServiceDep,
) -> AuthenticationService:
    return AuthenticationService.from_factory(
        factory,
        password_service=password_service,
        jwt_service=jwt_service,
        lockout=LockoutPolicy(
            max_failed_attempts=settings.max_failed_login_attempts,
            duration=timedelta(minutes=settings.lockout_minutes),
        ),
    )


AuthService = Annotated[AuthenticationService, Depends(get_authentication_service)]


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user(
    factory: RepoFactory,
    jwt_service: JWTServiceDep,
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> User:
    """
    Resolve the bearer access token to a stored user.

    Raises 401 when the header is missing, the token does not verify, the
    token is a refresh token, or its user no longer exists.
    """
    if credentials is None:
        raise _unauthorized("Authentication required")

    try:
        payload = jwt_service.verify_token(credentials.credentials)
    except InvalidTokenError as e:
        logger.warning("Rejected bearer token: %s", e)
        raise _unauthorized("Invalid or expired token") from e

    if not payload.is_access_token():
        logger.warning("Refresh token presented as bearer for %s", payload.user_id)
        raise _unauthorized("Invalid token type")

    user = await factory.user_repository().find_by_id(payload.user_id)
    if user is None:
        logger.warning("Token subject %s no longer exists", payload.user_id)
        raise _unauthorized("User not found")
    return user


CurrentUser = Annotated[User, Depends(get_current_user)]


async def require_admin(user: CurrentUser) -> User:
    if not user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required",
        )
    return user


AdminUser = Annotated[User, Depends(require_admin)]


async def require_testing_endpoints(settings: SettingsDep) -> None:
    """Answer 404 for the database endpoints outside development/testing."""
    if not settings.testing_endpoints_enabled:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not Found")
