"""Schemas for the test-support database endpoints."""

from datetime import datetime

from pydantic import Field

from roster.presentation.api.schemas.common import CamelModel


class WorkerRequest(CamelModel):
    """Identifies the E2E test worker whose database is targeted."""

    worker_index: int = Field(default=0, ge=0)


class DatabaseOperationResponse(CamelModel):
    message: str
    worker_index: int
    timestamp: datetime


class DatabaseStatusResponse(CamelModel):
    environment: str
    database: str | None = None
    can_connect: bool
    people_count: int
    roles_count: int
    users_count: int
    timestamp: datetime
