"""Role ORM model."""

from typing import TYPE_CHECKING

from sqlalchemy import Integer, String, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.infrastructure.persistence.database import Base
from app.infrastructure.persistence.models.mixins import AuditedModel

if TYPE_CHECKING:
    from app.infrastructure.persistence.models.permission import Permission
    from app.infrastructure.persistence.models.user import User


class Role(AuditedModel, Base):
    """Role (admin, editor, viewer, ...). Table: roles. Unique name."""

    __tablename__ = "roles"

    name: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    display_name: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    description: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    status: Mapped[int] = mapped_column(
        Integer, nullable=False, default=1, server_default=text("1")
    )

    permissions: Mapped[list["Permission"]] = relationship(
        "Permission",
        secondary="role_permissions",
        primaryjoin="Role.id == RolePermission.role_id",
        secondaryjoin=(
            "and_(Permission.id == RolePermission.permission_id, "
            "Permission.deleted_at.is_(None))"
        ),
        order_by="Permission.id",
        viewonly=True,
        lazy="raise",
    )
    users: Mapped[list["User"]] = relationship(
        "User",
        secondary="user_roles",
        primaryjoin="Role.id == UserRole.role_id",
        secondaryjoin="and_(User.id == UserRole.user_id, User.deleted_at.is_(None))",
        order_by="User.id",
        viewonly=True,
        lazy="raise",
    )
