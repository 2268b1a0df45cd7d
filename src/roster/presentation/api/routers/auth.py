"""Sign-up, sign-in and token endpoints under ``/api/auth``."""

import logging
from contextlib import asynccontextmanager
from typing import Annotated, AsyncIterator

from fastapi import APIRouter, Cookie, HTTPException, Response, status

from roster.domain.user import EmailAlreadyExistsError, InvalidEmailError, User
from roster.presentation.api.dependencies import (
    AuthService,
    CurrentUser,
    RepoFactory,
    SettingsDep,
)
from roster.presentation.api.schemas.auth import (
    AuthResponse,
    LoginRequest,
    RefreshRequest,
    RegisterRequest,
    TokenResponse,
    UserResponse,
)
from roster_auth import (
    AccountLockedError,
    InvalidCredentialsError,
    InvalidRefreshTokenError,
    InvalidTokenError,
    WeakPasswordError,
)
from roster_config.settings import Settings

logger = logging.getLogger(__name__)

router = APIRouter()

REFRESH_TOKEN_COOKIE = "refreshToken"  # NOQA: S105
REFRESH_TOKEN_COOKIE_PATH = "/api/auth"


@asynccontextmanager
async def _committing(
    factory: RepoFactory,
    keep_on: tuple[type[Exception], ...] = (),
) -> AsyncIterator[None]:
    """Commit when the block succeeds or raises one of ``keep_on``."""
    try:
        yield
    except keep_on:
        await factory.session.commit()
        raise
    except Exception:
        await factory.session.rollback()
        raise
    await factory.session.commit()


def _error(status_code: int, detail: str) -> HTTPException:
    return HTTPException(status_code=status_code, detail=detail)


def _store_refresh_cookie(response: Response, token: str, settings: Settings) -> None:
    # HttpOnly and scoped to the auth endpoints
    response.set_cookie(
        key=REFRESH_TOKEN_COOKIE,
        value=token,
        max_age=settings.jwt_refresh_token_expire_days * 86400,
        path=REFRESH_TOKEN_COOKIE_PATH,
        secure=settings.api_cookie_secure,
        httponly=True,
        samesite=settings.api_cookie_samesite,
    )


def _auth_body(
    user: User,
    access_token: str,
    refresh_token: str,
    settings: Settings,
) -> AuthResponse:
    return AuthResponse(
        user=UserResponse.from_domain(user),
        access_token=access_token,
        refresh_token=refresh_token,
        expires_in=settings.jwt_access_token_expire_minutes * 60,
    )


@router.post(
    "/register",
    status_code=status.HTTP_201_CREATED,
    summary="Create an account",
    responses={
        400: {"description": "Password too weak or email malformed"},
        403: {"description": "Registration is closed"},
        409: {"description": "Email already taken"},
    },
)
async def register(
    request: RegisterRequest,
    response: Response,
    auth_service: AuthService,
    factory: RepoFactory,
    settings: SettingsDep,
) -> AuthResponse:
    """
    Create an account and sign it in.

    The very first account is an admin. In `admin_only` registration mode
    every later sign-up is refused with 403.
    """
    if settings.registration_mode == "admin_only":
        if await factory.user_repository().count() > 0:
            raise _error(
                status.HTTP_403_FORBIDDEN,
                "Registration is disabled. Contact an administrator.",
            )

    try:
        async with _committing(factory):
            user, access_token, refresh_token = await auth_service.register(
                email=request.email,
                password=request.password,
                first_name=request.first_name,
                last_name=request.last_name,
            )
    except EmailAlreadyExistsError as e:
        raise _error(
            status.HTTP_409_CONFLICT,
            "Email address is already registered",
        ) from e
    except (WeakPasswordError, InvalidEmailError) as e:
        raise _error(status.HTTP_400_BAD_REQUEST, e.message) from e

    _store_refresh_cookie(response, refresh_token, settings)
    return _auth_body(user, access_token, refresh_token, settings)


@router.post(
    "/login",
    summary="Sign in",
    responses={
        401: {"description": "Wrong email or password"},
        423: {"description": "Too many failed attempts; account locked"},
    },
)
async def login(
    request: LoginRequest,
    response: Response,
    auth_service: AuthService,
    factory: RepoFactory,
    settings: SettingsDep,
) -> AuthResponse:
    """Exchange email and password for an access and a refresh token."""
    try:
        # Failed attempts are counted even though the request fails
        async with _committing(
            factory,
            keep_on=(InvalidCredentialsError, AccountLockedError),
        ):
            user, access_token, refresh_token = await auth_service.login(
                email=request.email,
                password=request.password,
            )
    except InvalidCredentialsError as e:
        raise _error(status.HTTP_401_UNAUTHORIZED, "Invalid email or password") from e
    except AccountLockedError as e:
        raise _error(status.HTTP_423_LOCKED, e.message) from e

    _store_refresh_cookie(response, refresh_token, settings)
    return _auth_body(user, access_token, refresh_token, settings)


@router.post(
    "/refresh",
    summary="Rotate tokens",
    responses={
        401: {"description": "Missing, invalid, expired or revoked refresh token"},
    },
)
async def refresh_token(
    response: Response,
    auth_service: AuthService,
    factory: RepoFactory,
    settings: SettingsDep,
    request: RefreshRequest | None = None,
    refresh_token_cookie: Annotated[
        str | None,
        Cookie(alias=REFRESH_TOKEN_COOKIE),
    ] = None,
) -> TokenResponse:
    """
    Trade a refresh token for a new pair and revoke the old one.

    A token in the body wins over the cookie.
    """
    token = (request.refresh_token if request else None) or refresh_token_cookie
    if not token:
        raise _error(status.HTTP_401_UNAUTHORIZED, "No refresh token provided")

    try:
        # Reuse of a revoked token revokes the user's other tokens
        async with _committing(factory, keep_on=(InvalidRefreshTokenError,)):
            _, access_token, new_refresh_token = await auth_service.refresh_token(
                token,
            )
    except InvalidRefreshTokenError as e:
        raise _error(status.HTTP_401_UNAUTHORIZED, e.message) from e
    except InvalidTokenError as e:
        raise _error(
            status.HTTP_401_UNAUTHORIZED,
            "Invalid or expired refresh token",
        ) from e

    _store_refresh_cookie(response, new_refresh_token, settings)
    return TokenResponse(
        access_token=access_token,
        refresh_token=new_refresh_token,
        expires_in=settings.jwt_access_token_expire_minutes * 60,
    )


@router.post(
    "/logout",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Sign out everywhere",
    responses={401: {"description": "Not authenticated"}},
)
async def logout(
    response: Response,
    user: CurrentUser,
    auth_service: AuthService,
    factory: RepoFactory,
) -> None:
    """Revoke every refresh token of the caller and drop the cookie."""
    async with _committing(factory):
        await auth_service.logout(user.id)
    response.delete_cookie(key=REFRESH_TOKEN_COOKIE, path=REFRESH_TOKEN_COOKIE_PATH)


@router.get(
    "/me",
    summary="Current user",
    responses={401: {"description": "Not authenticated"}},
)
async def get_me(user: CurrentUser) -> UserResponse:
    return UserResponse.from_domain(user)
