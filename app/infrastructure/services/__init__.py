"""Infrastructure services wired in at startup."""

from app.infrastructure.services.change_audit_recorder import ChangeAuditRecorder

__all__ = ["ChangeAuditRecorder"]
