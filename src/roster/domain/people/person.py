"""Person entity."""

import re
from datetime import datetime
from typing import Iterable, List, Optional
from uuid import UUID, uuid4

from roster.domain.people.exceptions import InvalidFullNameError, InvalidPhoneError
from roster.domain.roles.role import Role
from roster.domain.shared.time import utc_now

MAX_FULL_NAME_LENGTH = 200

# Letters, spaces, hyphens, apostrophes and dots ("Mary-Jane O'Neil Jr.")
FULL_NAME_PATTERN = re.compile(r"^[a-zA-Z\s\-'\.]+$")

# Optional leading plus, then 7-15 digits/spaces/separators
PHONE_PATTERN = re.compile(r"^\+?[\d\s\-\(\)\.]{7,15}$")


class Person:
    """
    A person managed by the roster.

    The row version starts at 1 and is incremented on every change so that
    clients can detect concurrent edits.
    """

    def __init__(  # NOQA: PLR0913
        self,
        full_name: str,
        phone: Optional[str] = None,
        roles: Optional[Iterable[Role]] = None,
        id: Optional[UUID] = None,
        row_version: int = 1,
        created_at: Optional[datetime] = None,
        updated_at: Optional[datetime] = None,
    ):
        self._id = id if id is not None else uuid4()
        self._full_name = self._validate_full_name(full_name)
        self._phone = self._validate_phone(phone)
        self._roles = self._unique_roles(roles or [])
        self._row_version = row_version
        self._created_at = created_at or utc_now()
        self._updated_at = updated_at or self._created_at

    @classmethod
    def create(
        cls,
        full_name: str,
        phone: Optional[str] = None,
        roles: Optional[Iterable[Role]] = None,
    ) -> "Person":
        return cls(full_name=full_name, phone=phone, roles=roles)

    @classmethod
    def reconstitute(  # NOQA: PLR0913
        cls,
        id: UUID,
        full_name: str,
        phone: Optional[str],
        roles: Iterable[Role],
        row_version: int,
        created_at: datetime,
        updated_at: datetime,
    ) -> "Person":
        return cls(
            id=id,
            full_name=full_name,
            phone=phone,
            roles=roles,
            row_version=row_version,
            created_at=created_at,
            updated_at=updated_at,
        )

    @staticmethod
    def _validate_full_name(full_name: str) -> str:
        if not full_name or not full_name.strip():
            msg = "Full name is required"
            raise InvalidFullNameError(msg)
        normalized = full_name.strip()
        if len(normalized) > MAX_FULL_NAME_LENGTH:
            msg = f"Full name cannot exceed {MAX_FULL_NAME_LENGTH} characters"
            raise InvalidFullNameError(msg)
        if not FULL_NAME_PATTERN.match(normalized):
            msg = (
                "Full name can only contain letters, spaces, hyphens, "
                "apostrophes, and periods"
            )
            raise InvalidFullNameError(msg)
        return normalized

    @staticmethod
    def _validate_phone(phone: Optional[str]) -> Optional[str]:
        if phone is None or not phone.strip():
            return None
        normalized = phone.strip()
        if not PHONE_PATTERN.match(normalized):
            raise InvalidPhoneError(normalized)
        return normalized

    @staticmethod
    def _unique_roles(roles: Iterable[Role]) -> List[Role]:
        seen: dict[UUID, Role] = {}
        for role in roles:
            seen.setdefault(role.id, role)
        return sorted(seen.values(), key=lambda r: r.name.lower())

    @property
    def id(self) -> UUID:
        return self._id

    @property
    def full_name(self) -> str:
        return self._full_name

    @property
    def phone(self) -> Optional[str]:
        return self._phone

    @property
    def roles(self) -> List[Role]:
        return list(self._roles)

    @property
    def role_ids(self) -> List[UUID]:
        return [role.id for role in self._roles]

    @property
    def row_version(self) -> int:
        return self._row_version

    @property
    def created_at(self) -> datetime:
        return self._created_at

    @property
    def updated_at(self) -> datetime:
        return self._updated_at

    def update(
        self,
        full_name: str,
        phone: Optional[str],
        roles: Iterable[Role],
    ) -> None:
        # Validate all fields before mutating any
        new_name = self._validate_full_name(full_name)
        new_phone = self._validate_phone(phone)
        self._full_name = new_name
        self._phone = new_phone
        self._roles = self._unique_roles(roles)
        self._touch()

    def assign_roles(self, roles: Iterable[Role]) -> None:
        """Replace the role set. Duplicates collapse to one assignment."""
        self._roles = self._unique_roles(roles)
        self._touch()

    def remove_role(self, role_id: UUID) -> None:
        remaining = [role for role in self._roles if role.id != role_id]
        if len(remaining) != len(self._roles):
            self._roles = remaining
            self._touch()

    def has_role(self, role_id: UUID) -> bool:
        return any(role.id == role_id for role in self._roles)

    def _touch(self) -> None:
        self._row_version += 1
        self._updated_at = utc_now()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Person):
            return NotImplemented
        return self._id == other._id

    def __hash__(self) -> int:
        return hash(self._id)

    def __repr__(self) -> str:
        return f"Person(id={self._id}, full_name={self._full_name!r})"
