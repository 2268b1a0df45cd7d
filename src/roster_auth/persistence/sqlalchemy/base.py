"""Declarative base of the ``user_credentials`` and ``refresh_tokens`` tables.

Kept apart from the people/roles metadata; the application creates both
sets of tables at startup.
"""

from sqlalchemy.orm import DeclarativeBase


class AuthBase(DeclarativeBase):
    pass
