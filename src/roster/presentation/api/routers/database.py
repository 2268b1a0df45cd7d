"""Database maintenance endpoints for end-to-end test runs.

Only served when the application runs in a development or testing
environment; otherwise every route answers 404.
"""

import logging

from fastapi import APIRouter, Depends

from roster.application.services import DatabaseMaintenanceService
from roster.presentation.api.dependencies import (
    RepoFactory,
    SettingsDep,
    require_testing_endpoints,
)
from roster.presentation.api.schemas.database import (
    DatabaseOperationResponse,
    DatabaseStatusResponse,
    WorkerRequest,
)
from roster_config.settings import Settings

logger = logging.getLogger(__name__)

router = APIRouter(dependencies=[Depends(require_testing_endpoints)])


def _service(factory: RepoFactory, settings: Settings) -> DatabaseMaintenanceService:
    database_path = settings.database_path
    return DatabaseMaintenanceService.from_factory(
        factory,
        environment=settings.app_env,
        database_location=str(database_path) if database_path else None,
    )


@router.post(
    "/reset",
    summary="Reset database",
    responses={
        200: {"description": "People, roles and assignments deleted"},
        404: {"description": "Not available in this environment"},
    },
)
async def reset_database(
    request: WorkerRequest,
    factory: RepoFactory,
    settings: SettingsDep,
) -> DatabaseOperationResponse:
    """Delete all people and roles. Users and their credentials are kept."""
    service = _service(factory, settings)
    try:
        result = await service.reset(request.worker_index)
        await factory.session.commit()
    except Exception:
        await factory.session.rollback()
        logger.exception("Failed to reset database for worker %d", request.worker_index)
        raise

    return DatabaseOperationResponse(
        message="Database reset successfully",
        worker_index=result.worker_index,
        timestamp=result.timestamp,
    )


@router.post(
    "/seed",
    summary="Seed database",
    responses={
        200: {"description": "Default roles and people inserted into empty tables"},
        404: {"description": "Not available in this environment"},
    },
)
async def seed_database(
    request: WorkerRequest,
    factory: RepoFactory,
    settings: SettingsDep,
) -> DatabaseOperationResponse:
    service = _service(factory, settings)
    try:
        result = await service.seed(request.worker_index)
        await factory.session.commit()
    except Exception:
        await factory.session.rollback()
        logger.exception("Failed to seed database for worker %d", request.worker_index)
        raise

    return DatabaseOperationResponse(
        message="Database seeded successfully",
        worker_index=result.worker_index,
        timestamp=result.timestamp,
    )


@router.get(
    "/status",
    summary="Database status",
    responses={
        200: {"description": "Environment, connectivity and row counts"},
        404: {"description": "Not available in this environment"},
    },
)
async def database_status(
    factory: RepoFactory,
    settings: SettingsDep,
) -> DatabaseStatusResponse:
    status = await _service(factory, settings).status()
    return DatabaseStatusResponse(
        environment=status.environment,
        database=status.database,
        can_connect=status.can_connect,
        people_count=status.people_count,
        roles_count=status.roles_count,
        users_count=status.users_count,
        timestamp=status.timestamp,
    )
