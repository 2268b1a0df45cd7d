"""The address a user signs in with."""

import re
from dataclasses import dataclass

from roster.domain.user.exceptions import InvalidEmailError

MAX_EMAIL_LENGTH = 254

_ADDRESS = re.compile(r"^[^@\s]+@[A-Za-z0-9-]+(\.[A-Za-z0-9-]+)*\.[A-Za-z]{2,}$")


@dataclass(frozen=True)
class Email:
    """
    A syntactically valid e-mail address, stored trimmed and lower-case.

    Two spellings of one address (``Ada@Example.com`` and ``ada@example.com``)
    compare equal, which keeps registration unique per mailbox.
    """

    value: str

    def __post_init__(self) -> None:
        address = (self.value or "").strip().lower()
        if not address:
            msg = "Email cannot be empty"
            raise InvalidEmailError(msg)
        if len(address) > MAX_EMAIL_LENGTH or not _ADDRESS.match(address):
            msg = f"Invalid email format: {self.value}"
            raise InvalidEmailError(msg)
        object.__setattr__(self, "value", address)

    @property
    def domain(self) -> str:
        return self.value.rsplit("@", 1)[1]

    def __str__(self) -> str:
        return self.value
