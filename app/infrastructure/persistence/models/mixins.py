"""SQLAlchemy mixins for common model patterns.

Provides: IdMixin, TimestampMixin, SoftDeleteMixin and the combined
AuditedModel used by users, roles and permissions.

sort_order keeps the primary key first and the bookkeeping columns last so
the table (and audit snapshot) column order reads naturally.
"""

from datetime import datetime

from sqlalchemy import DateTime, Integer
from sqlalchemy.orm import Mapped, declared_attr, mapped_column
from sqlalchemy.sql import func


class IdMixin:
    """Mixin for an integer auto-increment primary key."""

    @declared_attr
    def id(cls) -> Mapped[int]:
        return mapped_column(
            Integer, primary_key=True, autoincrement=True, sort_order=-10
        )


class TimestampMixin:
    """Mixin for created_at and updated_at (server defaults, timezone-aware)."""

    @declared_attr
    def created_at(cls) -> Mapped[datetime]:
        return mapped_column(
            DateTime(timezone=True),
            server_default=func.now(),
            nullable=False,
            sort_order=10,
        )

    @declared_attr
    def updated_at(cls) -> Mapped[datetime]:
        return mapped_column(
            DateTime(timezone=True),
            server_default=func.now(),
            onupdate=func.now(),
            nullable=False,
            sort_order=11,
        )


class SoftDeleteMixin:
    """Mixin for soft delete (deleted_at). Null means not deleted."""

    @declared_attr
    def deleted_at(cls) -> Mapped[datetime | None]:
        return mapped_column(
            DateTime(timezone=True), nullable=True, index=True, sort_order=12
        )


class AuditedModel(IdMixin, TimestampMixin, SoftDeleteMixin):
    """Combined mixin: integer id + timestamps + soft delete."""

    __abstract__ = True
