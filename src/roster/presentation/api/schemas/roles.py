"""Role schemas for request/response models."""

from datetime import datetime
from uuid import UUID

from pydantic import ConfigDict, Field

from roster.domain.roles import Role
from roster.presentation.api.schemas.common import CamelModel


class RoleResponse(CamelModel):
    """Response schema for a role."""

    id: UUID
    name: str
    description: str | None = None
    row_version: int
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_domain(cls, role: Role) -> "RoleResponse":
        return cls(
            id=role.id,
            name=role.name,
            description=role.description,
            row_version=role.row_version,
            created_at=role.created_at,
            updated_at=role.updated_at,
        )


class RoleCreateRequest(CamelModel):
    """Request schema for creating a role.

    When a role with the same name exists it is returned instead.
    """

    name: str = Field(..., description="Unique role name (max 100 characters)")
    description: str | None = Field(
        default=None,
        description="Optional description (max 500 characters)",
    )

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "name": "Editor",
                "description": "Can edit content",
            },
        },
    )


class RoleUpdateRequest(CamelModel):
    """Request schema for updating a role."""

    name: str
    description: str | None = None
    row_version: int | None = Field(
        default=None,
        description="Version the client last saw; a mismatch is rejected with 409",
    )
