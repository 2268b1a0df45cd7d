"""Role entity."""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from roster.domain.roles.exceptions import (
    InvalidRoleDescriptionError,
    InvalidRoleNameError,
)
from roster.domain.shared.time import utc_now

MAX_NAME_LENGTH = 100
MAX_DESCRIPTION_LENGTH = 500


class Role:
    """
    A named role that can be assigned to people.

    Role names are unique across the system. Uniqueness is enforced by the
    application layer and the persistence layer, not by the entity itself.
    """

    def __init__(  # NOQA: PLR0913
        self,
        name: str,
        description: Optional[str] = None,
        id: Optional[UUID] = None,
        row_version: int = 1,
        created_at: Optional[datetime] = None,
        updated_at: Optional[datetime] = None,
    ):
        self._id = id if id is not None else uuid4()
        self._name = self._validate_name(name)
        self._description = self._validate_description(description)
        self._row_version = row_version
        self._created_at = created_at or utc_now()
        self._updated_at = updated_at or self._created_at

    @classmethod
    def create(cls, name: str, description: Optional[str] = None) -> "Role":
        return cls(name=name, description=description)

    @classmethod
    def reconstitute(  # NOQA: PLR0913
        cls,
        id: UUID,
        name: str,
        description: Optional[str],
        row_version: int,
        created_at: datetime,
        updated_at: datetime,
    ) -> "Role":
        return cls(
            id=id,
            name=name,
            description=description,
            row_version=row_version,
            created_at=created_at,
            updated_at=updated_at,
        )

    @staticmethod
    def _validate_name(name: str) -> str:
        if not name or not name.strip():
            msg = "Role name is required"
            raise InvalidRoleNameError(msg)
        normalized = name.strip()
        if len(normalized) > MAX_NAME_LENGTH:
            msg = f"Role name cannot exceed {MAX_NAME_LENGTH} characters"
            raise InvalidRoleNameError(msg)
        return normalized

    @staticmethod
    def _validate_description(description: Optional[str]) -> Optional[str]:
        if description is None:
            return None
        if len(description) > MAX_DESCRIPTION_LENGTH:
            msg = f"Description cannot exceed {MAX_DESCRIPTION_LENGTH} characters"
            raise InvalidRoleDescriptionError(msg)
        return description.strip() or None

    @property
    def id(self) -> UUID:
        return self._id

    @property
    def name(self) -> str:
        return self._name

    @property
    def description(self) -> Optional[str]:
        return self._description

    @property
    def row_version(self) -> int:
        return self._row_version

    @property
    def created_at(self) -> datetime:
        return self._created_at

    @property
    def updated_at(self) -> datetime:
        return self._updated_at

    def update(self, name: str, description: Optional[str]) -> None:
        self._name = self._validate_name(name)
        self._description = self._validate_description(description)
        self._touch()

    def _touch(self) -> None:
        self._row_version += 1
        self._updated_at = utc_now()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Role):
            return NotImplemented
        return self._id == other._id

    def __hash__(self) -> int:
        return hash(self._id)

    def __repr__(self) -> str:
        return f"Role(id={self._id}, name={self._name!r})"
