"""Shared enumerations.

Cross-cutting enums used by application and infrastructure (audit actions,
record status).
"""

from enum import Enum, IntEnum


class _ValuesMixin:
    """Mixin that adds a values() classmethod to Enums."""

    @classmethod
    def values(cls) -> list:
        """Return all valid values."""
        return [member.value for member in cls]


class AuditAction(_ValuesMixin, str, Enum):
    """Kind of audited write operation."""

    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


class RecordStatus(_ValuesMixin, IntEnum):
    """Enabled/disabled flag stored on users, roles and permissions."""

    DISABLED = 0
    ENABLED = 1
