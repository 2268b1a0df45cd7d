"""User entity: an account that can sign in to the API."""

from datetime import datetime
from typing import Optional, Union
from uuid import UUID, uuid4

from roster.domain.shared.time import utc_now
from roster.domain.user.value_objects import Email, UserRole


class User:
    """
    An API account with an email address and an access level.

    Passwords are not part of the entity; ``roster_auth`` keeps them in a
    separate credential record keyed by the user's id.
    """

    def __init__(  # NOQA: PLR0913
        self,
        email: Union[str, Email],
        first_name: str = "",
        last_name: str = "",
        role: Union[str, UserRole] = UserRole.USER,
        id: Optional[UUID] = None,
        created_at: Optional[datetime] = None,
        updated_at: Optional[datetime] = None,
    ):
        self._id = id if id is not None else uuid4()
        self._email = Email(email) if isinstance(email, str) else email
        self._first_name = first_name.strip()
        self._last_name = last_name.strip()
        self._role = UserRole(role)
        self._created_at = created_at or utc_now()
        self._updated_at = updated_at or self._created_at

    @classmethod
    def create(
        cls,
        email: Union[str, Email],
        first_name: str = "",
        last_name: str = "",
        role: UserRole = UserRole.USER,
    ) -> "User":
        return cls(email, first_name=first_name, last_name=last_name, role=role)

    @classmethod
    def reconstitute(  # NOQA: PLR0913
        cls,
        id: UUID,
        email: str,
        first_name: str,
        last_name: str,
        role: Union[str, UserRole],
        created_at: datetime,
        updated_at: datetime,
    ) -> "User":
        """Rebuild a stored user without treating it as new."""
        return cls(
            email,
            first_name=first_name,
            last_name=last_name,
            role=role,
            id=id,
            created_at=created_at,
            updated_at=updated_at,
        )

    @property
    def id(self) -> UUID:
        return self._id

    @property
    def role(self) -> UserRole:
        return self._role

    @property
    def first_name(self) -> str:
        return self._first_name

    @property
    def last_name(self) -> str:
        return self._last_name

    @property
    def created_at(self) -> datetime:
        return self._created_at

    @property
    def updated_at(self) -> datetime:
        return self._updated_at

    @property
    def email(self) -> str:
        return self._email.value

    @property
    def full_name(self) -> str:
        return " ".join(part for part in (self._first_name, self._last_name) if part)

    @property
    def is_admin(self) -> bool:
        return self._role is UserRole.ADMIN

    def change_role(self, role: Union[str, UserRole]) -> None:
        new_role = UserRole(role)
        if new_role is not self._role:
            self._role = new_role
            self._updated_at = utc_now()

    def __eq__(self, other: object) -> bool:
        if isinstance(other, User):
            return self._id == other._id
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._id)

    def __repr__(self) -> str:
        return f"User(id={self._id}, email={self.email}, role={self._role.value})"
