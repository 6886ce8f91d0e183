"""Shared utilities: request context, enums, telemetry, and cross-cutting helpers.

Used by domain, application, and infrastructure. No business logic.
"""

from app.shared.context import SYSTEM_CONTEXT, AuditContext
from app.shared.enums import AuditAction, RecordStatus
from app.shared.utils import ensure_utc, utc_now

__all__ = [
    "AuditContext",
    "SYSTEM_CONTEXT",
    "AuditAction",
    "RecordStatus",
    "utc_now",
    "ensure_utc",
]
