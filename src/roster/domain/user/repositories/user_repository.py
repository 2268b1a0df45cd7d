from abc import ABC, abstractmethod
from typing import Optional, Union
from uuid import UUID

from roster.domain.user.user import User
from roster.domain.user.value_objects import Email


class UserRepository(ABC):
    """Lookup and storage of ``User`` entities."""

    @abstractmethod
    async def find_by_id(self, user_id: UUID) -> Optional[User]:
        pass

    @abstractmethod
    async def find_by_email(self, email: Union[str, Email]) -> Optional[User]:
        """
        Look a user up by normalized address.

        Raises
        ------
        InvalidEmailError
            If ``email`` is a string that is not an email address
        """

    @abstractmethod
    async def count(self) -> int:
        """Number of stored users; zero means the next sign-up is the admin."""

    @abstractmethod
    async def save(self, user: User) -> None:
        """
        Insert ``user`` or overwrite its stored state.

        Raises
        ------
        EmailAlreadyExistsError
            If another user already has the address
        """

    @abstractmethod
    async def delete(self, user_id: UUID) -> bool:
        pass
