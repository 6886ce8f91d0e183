"""User ORM model."""

from typing import TYPE_CHECKING

from sqlalchemy import Integer, String, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.infrastructure.persistence.database import Base
from app.infrastructure.persistence.models.mixins import AuditedModel

if TYPE_CHECKING:
    from app.infrastructure.persistence.models.role import Role


class User(AuditedModel, Base):
    """User account. Table: users. Unique username and email."""

    __tablename__ = "users"

    username: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    email: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    password: Mapped[str] = mapped_column(String(255), nullable=False)
    nickname: Mapped[str | None] = mapped_column(String(50), nullable=True)
    status: Mapped[int] = mapped_column(
        Integer, nullable=False, default=1, server_default=text("1")
    )

    roles: Mapped[list["Role"]] = relationship(
        "Role",
        secondary="user_roles",
        primaryjoin="User.id == UserRole.user_id",
        secondaryjoin="and_(Role.id == UserRole.role_id, Role.deleted_at.is_(None))",
        order_by="Role.id",
        viewonly=True,
        lazy="raise",
    )
