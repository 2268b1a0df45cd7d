"""Roles router for role management endpoints.

Reading roles requires any authenticated user; changing them requires an
admin. The collection endpoint supports conditional requests through
``ETag``/``If-None-Match`` and ``Last-Modified``/``If-Modified-Since``.
"""

import base64
import hashlib
import logging
from datetime import datetime
from email.utils import format_datetime, parsedate_to_datetime
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Header, Request, Response, status
from pydantic import TypeAdapter

from roster.application.commands import (
    CreateRoleCommand,
    DeleteRoleCommand,
    UpdateRoleCommand,
)
from roster.application.queries import GetRoleQuery, ListRolesQuery
from roster.domain.shared.time import ensure_tz_aware
from roster.presentation.api.dependencies import AdminUser, CurrentUser, RepoFactory
from roster.presentation.api.schemas.roles import (
    RoleCreateRequest,
    RoleResponse,
    RoleUpdateRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter()

_role_list_adapter = TypeAdapter(list[RoleResponse])

IfNoneMatch = Annotated[str | None, Header()]
IfModifiedSince = Annotated[str | None, Header()]


def compute_etag(body: bytes) -> str:
    """Strong ETag: URL-safe base64 of the body's MD5, without padding."""
    digest = hashlib.md5(body).digest()  # NOQA: S324
    return '"' + base64.urlsafe_b64encode(digest).decode("ascii").rstrip("=") + '"'


def format_http_date(value: datetime) -> str:
    return format_datetime(ensure_tz_aware(value), usegmt=True)


def _etag_matches(if_none_match: str | None, etag: str) -> bool:
    if not if_none_match:
        return False
    for candidate in if_none_match.split(","):
        tag = candidate.strip()
        if tag == "*":
            return True
        tag = tag.removeprefix("W/")
        if tag in (etag, etag.strip('"')):
            return True
    return False


def _not_modified_since(
    if_modified_since: str | None,
    last_modified: datetime | None,
) -> bool:
    if not if_modified_since or last_modified is None:
        return False
    try:
        since = parsedate_to_datetime(if_modified_since)
    except (TypeError, ValueError):
        logger.debug("Ignoring malformed If-Modified-Since: %s", if_modified_since)
        return False
    # HTTP dates carry whole seconds only
    modified = ensure_tz_aware(last_modified).replace(microsecond=0)
    return modified <= ensure_tz_aware(since)


@router.get(
    "",
    summary="List roles",
    responses={
        200: {"description": "All roles ordered by name"},
        304: {"description": "Not modified since the client's copy"},
        401: {"description": "Not authenticated"},
    },
)
async def list_roles(
    _user: CurrentUser,
    factory: RepoFactory,
    if_none_match: IfNoneMatch = None,
    if_modified_since: IfModifiedSince = None,
) -> Response:
    """
    List all roles.

    The response carries an `ETag` and `Last-Modified`. Clients sending
    `If-None-Match` or `If-Modified-Since` get 304 when nothing changed.
    """
    query = ListRolesQuery.from_factory(factory)
    result = await query.execute()

    body = _role_list_adapter.dump_json(
        [RoleResponse.from_domain(role) for role in result.roles],
        by_alias=True,
    )
    etag = compute_etag(body)

    headers = {"ETag": etag}
    if result.last_modified is not None:
        headers["Last-Modified"] = format_http_date(result.last_modified)

    # If-Modified-Since only counts when no If-None-Match was sent
    if if_none_match:
        not_modified = _etag_matches(if_none_match, etag)
    else:
        not_modified = _not_modified_since(if_modified_since, result.last_modified)
    if not_modified:
        return Response(status_code=status.HTTP_304_NOT_MODIFIED, headers=headers)

    return Response(content=body, media_type="application/json", headers=headers)


@router.get(
    "/{role_id}",
    summary="Get role",
    responses={
        200: {"description": "Role details"},
        401: {"description": "Not authenticated"},
        404: {"description": "Role not found"},
    },
)
async def get_role(
    role_id: UUID,
    response: Response,
    _user: CurrentUser,
    factory: RepoFactory,
) -> RoleResponse:
    query = GetRoleQuery.from_factory(factory)
    role = await query.execute(role_id)

    response.headers["Last-Modified"] = format_http_date(role.updated_at)
    return RoleResponse.from_domain(role)


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    summary="Create role",
    responses={
        201: {"description": "Role created, or the existing role with that name"},
        400: {"description": "Invalid name or description"},
        403: {"description": "Admin access required"},
    },
)
async def create_role(
    request: RoleCreateRequest,
    http_request: Request,
    response: Response,
    _admin: AdminUser,
    factory: RepoFactory,
) -> RoleResponse:
    """
    Create a role.

    Creation is idempotent by name: if a role with the same name exists it
    is returned unchanged.
    """
    command = CreateRoleCommand.from_factory(factory)

    try:
        result = await command.execute(
            name=request.name,
            description=request.description,
        )
        await factory.session.commit()
    except Exception:
        await factory.session.rollback()
        raise

    response.headers["Location"] = str(
        http_request.url_for("get_role", role_id=str(result.role.id)),
    )
    return RoleResponse.from_domain(result.role)


@router.put(
    "/{role_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Update role",
    responses={
        204: {"description": "Role updated"},
        400: {"description": "Invalid name or description"},
        403: {"description": "Admin access required"},
        404: {"description": "Role not found"},
        409: {"description": "Name taken or role modified concurrently"},
    },
)
async def update_role(
    role_id: UUID,
    request: RoleUpdateRequest,
    _admin: AdminUser,
    factory: RepoFactory,
) -> None:
    command = UpdateRoleCommand.from_factory(factory)

    try:
        await command.execute(
            role_id=role_id,
            name=request.name,
            description=request.description,
            row_version=request.row_version,
        )
        await factory.session.commit()
    except Exception:
        await factory.session.rollback()
        raise


@router.delete(
    "/{role_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete role",
    responses={
        204: {"description": "Role deleted and removed from every person"},
        403: {"description": "Admin access required"},
        404: {"description": "Role not found"},
    },
)
async def delete_role(
    role_id: UUID,
    _admin: AdminUser,
    factory: RepoFactory,
) -> None:
    command = DeleteRoleCommand.from_factory(factory)

    try:
        await command.execute(role_id)
        await factory.session.commit()
    except Exception:
        await factory.session.rollback()
        raise

    logger.info("Role deleted: %s", role_id)
