"""People schemas for request/response models."""

from datetime import datetime
from uuid import UUID

from pydantic import ConfigDict, Field

from roster.domain.people import Person
from roster.presentation.api.schemas.common import CamelModel


class PersonRoleResponse(CamelModel):
    """A role as embedded in a person."""

    id: UUID
    name: str
    description: str | None = None


class PersonResponse(CamelModel):
    """Response schema for a person."""

    id: UUID
    full_name: str
    phone: str | None = None
    roles: list[PersonRoleResponse] = Field(default_factory=list)
    row_version: int
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_domain(cls, person: Person) -> "PersonResponse":
        return cls(
            id=person.id,
            full_name=person.full_name,
            phone=person.phone,
            roles=[
                PersonRoleResponse(
                    id=role.id,
                    name=role.name,
                    description=role.description,
                )
                for role in person.roles
            ],
            row_version=person.row_version,
            created_at=person.created_at,
            updated_at=person.updated_at,
        )


class PersonCreateRequest(CamelModel):
    """Request schema for creating a person."""

    full_name: str = Field(..., description="Letters, spaces, - ' and . only")
    phone: str | None = Field(default=None, description="Optional phone number")
    role_ids: list[UUID] | None = Field(
        default=None,
        description="Ids of existing roles to assign",
    )

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "fullName": "Ada Lovelace",
                "phone": "+44 20 7946 0958",
                "roleIds": ["550e8400-e29b-41d4-a716-446655440000"],
            },
        },
    )


class PersonUpdateRequest(CamelModel):
    """Request schema for updating a person.

    The update replaces name, phone and roles; omitting ``roleIds`` clears
    the person's roles.
    """

    full_name: str
    phone: str | None = None
    role_ids: list[UUID] | None = None
    row_version: int | None = Field(
        default=None,
        description="Version the client last saw; a mismatch is rejected with 409",
    )
