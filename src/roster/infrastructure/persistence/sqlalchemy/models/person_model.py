"""SQLAlchemy models for people and their role assignments."""

from __future__ import annotations

from typing import Optional
from uuid import UUID

from sqlalchemy import Column, ForeignKey, Integer, String, Table, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from roster.infrastructure.persistence.sqlalchemy.models.base import (
    Base,
    TimestampMixin,
)
from roster.infrastructure.persistence.sqlalchemy.models.role_model import RoleModel

# Many-to-many link; rows vanish with either side
person_roles = Table(
    "person_roles",
    Base.metadata,
    Column(
        "person_id",
        Uuid,
        ForeignKey("people.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column(
        "role_id",
        Uuid,
        ForeignKey("roles.id", ondelete="CASCADE"),
        primary_key=True,
        index=True,
    ),
)


class PersonModel(Base, TimestampMixin):
    """
    Database model for people.

    Roles are loaded eagerly with a SELECT IN so that async sessions never
    trigger lazy loads.

    Table: people
    """

    __tablename__ = "people"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True)
    full_name: Mapped[str] = mapped_column(String(200), nullable=False, index=True)
    phone: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    row_version: Mapped[int] = mapped_column(Integer, default=1, nullable=False)

    # Writes carry "WHERE row_version = <loaded value>"; the domain bumps it
    __mapper_args__ = {"version_id_col": row_version, "version_id_generator": False}

    roles: Mapped[list[RoleModel]] = relationship(
        RoleModel,
        secondary=person_roles,
        lazy="selectin",
        order_by=RoleModel.name,
    )

    def __repr__(self) -> str:
        return f"<PersonModel(id={self.id}, full_name={self.full_name})>"
