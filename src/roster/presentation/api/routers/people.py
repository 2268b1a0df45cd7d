"""People router for person management endpoints.

People endpoints are public; no bearer token is required.
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Request, Response, status

from roster.application.commands import (
    CreatePersonCommand,
    DeletePersonCommand,
    UpdatePersonCommand,
)
from roster.application.queries import GetPersonQuery, ListPeopleQuery
from roster.presentation.api.dependencies import RepoFactory
from roster.presentation.api.schemas.people import (
    PersonCreateRequest,
    PersonResponse,
    PersonUpdateRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get(
    "",
    summary="List people",
    responses={
        200: {"description": "All people with their roles"},
    },
)
async def list_people(factory: RepoFactory) -> list[PersonResponse]:
    query = ListPeopleQuery.from_factory(factory)
    people = await query.execute()
    return [PersonResponse.from_domain(person) for person in people]


@router.get(
    "/{person_id}",
    summary="Get person",
    responses={
        200: {"description": "Person details"},
        404: {"description": "Person not found"},
    },
)
async def get_person(person_id: UUID, factory: RepoFactory) -> PersonResponse:
    query = GetPersonQuery.from_factory(factory)
    person = await query.execute(person_id)
    return PersonResponse.from_domain(person)


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    summary="Create person",
    responses={
        201: {"description": "Person created"},
        400: {"description": "Invalid input or unknown role id"},
    },
)
async def create_person(
    request: PersonCreateRequest,
    http_request: Request,
    response: Response,
    factory: RepoFactory,
) -> PersonResponse:
    """
    Create a new person.

    Every id in `roleIds` must refer to an existing role.
    """
    command = CreatePersonCommand.from_factory(factory)

    try:
        person = await command.execute(
            full_name=request.full_name,
            phone=request.phone,
            role_ids=request.role_ids,
        )
        await factory.session.commit()
    except Exception:
        await factory.session.rollback()
        # Let the global exception handler process domain exceptions
        raise

    response.headers["Location"] = str(
        http_request.url_for("get_person", person_id=str(person.id)),
    )
    return PersonResponse.from_domain(person)


@router.put(
    "/{person_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Update person",
    responses={
        204: {"description": "Person updated"},
        400: {"description": "Invalid input or unknown role id"},
        404: {"description": "Person not found"},
        409: {"description": "Person was modified by another request"},
    },
)
async def update_person(
    person_id: UUID,
    request: PersonUpdateRequest,
    factory: RepoFactory,
) -> None:
    """
    Replace a person's name, phone and roles.

    Send the `rowVersion` from the last read to detect concurrent edits.
    """
    command = UpdatePersonCommand.from_factory(factory)

    try:
        await command.execute(
            person_id=person_id,
            full_name=request.full_name,
            phone=request.phone,
            role_ids=request.role_ids,
            row_version=request.row_version,
        )
        await factory.session.commit()
    except Exception:
        await factory.session.rollback()
        raise


@router.delete(
    "/{person_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete person",
    responses={
        204: {"description": "Person deleted"},
        404: {"description": "Person not found"},
    },
)
async def delete_person(person_id: UUID, factory: RepoFactory) -> None:
    command = DeletePersonCommand.from_factory(factory)

    try:
        await command.execute(person_id)
        await factory.session.commit()
    except Exception:
        await factory.session.rollback()
        raise

    logger.info("Person deleted: %s", person_id)
