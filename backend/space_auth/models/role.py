"""Role model and the user/role association table."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import Column, ForeignKey, String, Table, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from space_auth.core.extensions import db

from .base import ReprMixin, UUIDPKMixin

if TYPE_CHECKING:
    from .user import User

ADMIN_ROLE = "Admin"

user_roles = Table(
    "user_roles",
    db.metadata,
    Column("user_id", ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column("role_id", ForeignKey("roles.id", ondelete="CASCADE"), primary_key=True),
)


class Role(UUIDPKMixin, ReprMixin, db.Model):
    """Named permission group carried in access-token ``roles`` claims."""

    __tablename__ = "roles"

    name: Mapped[str] = mapped_column(String(64), nullable=False)

    users: Mapped[list[User]] = relationship(
        secondary=user_roles,
        back_populates="roles",
    )

    __table_args__ = (UniqueConstraint("name", name="uq_roles_name"),)
