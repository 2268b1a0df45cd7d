from datetime import datetime
from uuid import uuid4

from sqlalchemy import DateTime, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from roster_auth.persistence.sqlalchemy.base import AuthBase
from roster_auth.timestamps import utc_now


class RefreshTokenModel(AuthBase):
    """
    Table: refresh_tokens

    ``token_hash`` is the SHA-256 hex digest of the issued token. A row
    stays valid until ``revoked_at`` is set or ``expires_at`` passes.
    """

    __tablename__ = "refresh_tokens"

    id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False),
        primary_key=True,
        default=lambda: str(uuid4()),
    )
    user_id: Mapped[str] = mapped_column(String(36), index=True)
    token_hash: Mapped[str] = mapped_column(String(64), unique=True, index=True)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))
    revoked_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
    )

    def __repr__(self) -> str:
        return f"<RefreshTokenModel {self.id} user={self.user_id}>"
