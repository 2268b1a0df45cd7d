"""SQLAlchemy model for roles."""

from typing import Optional
from uuid import UUID

from sqlalchemy import Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from roster.infrastructure.persistence.sqlalchemy.models.base import (
    Base,
    TimestampMixin,
)


class RoleModel(Base, TimestampMixin):
    """
    Database model for roles.

    Table: roles
    """

    __tablename__ = "roles"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True)
    name: Mapped[str] = mapped_column(
        String(100),
        unique=True,
        nullable=False,
        index=True,
    )
    description: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    row_version: Mapped[int] = mapped_column(Integer, default=1, nullable=False)

    # Writes carry "WHERE row_version = <loaded value>"; the domain bumps it
    __mapper_args__ = {"version_id_col": row_version, "version_id_generator": False}

    def __repr__(self) -> str:
        return f"<RoleModel(id={self.id}, name={self.name})>"
