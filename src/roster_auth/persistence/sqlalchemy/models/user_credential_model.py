"""Password hash and login throttling columns, one row per user."""

from datetime import datetime
from uuid import uuid4

from sqlalchemy import DateTime, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from roster_auth.persistence.sqlalchemy.base import AuthBase
from roster_auth.timestamps import utc_now


class UserCredentialModel(AuthBase):
    """
    Table: user_credentials

    ``user_id`` holds the id of a row in ``users`` but carries no foreign
    key, so the auth tables can live without the people schema.
    """

    __tablename__ = "user_credentials"

    id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False),
        primary_key=True,
        default=lambda: str(uuid4()),
    )
    user_id: Mapped[str] = mapped_column(String(36), unique=True, index=True)
    password_hash: Mapped[str] = mapped_column(String(255))
    failed_login_attempts: Mapped[int] = mapped_column(Integer, default=0)
    locked_until: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    last_login_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        onupdate=utc_now,
    )

    def __repr__(self) -> str:
        return f"<UserCredentialModel user_id={self.user_id}>"
