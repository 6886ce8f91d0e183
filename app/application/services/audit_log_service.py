"""Audit log query service (read-only)."""

from __future__ import annotations

from typing import Any

from app.application.services._pagination import page_offset
from app.domain.exceptions import ResourceNotFoundException


class AuditLogService:
    """List and fetch change-history entries."""

    def __init__(self, audit_log_repo: Any) -> None:
        self._repo = audit_log_repo

    async def list_entries(
        self,
        page: int,
        page_size: int,
        *,
        table_name: str | None = None,
        record_id: int | None = None,
        action: str | None = None,
        user_id: int | None = None,
    ) -> tuple[list[Any], int]:
        """Newest first, optionally filtered."""
        return await self._repo.list(
            skip=page_offset(page, page_size),
            limit=page_size,
            table_name=table_name,
            record_id=record_id,
            action=action,
            user_id=user_id,
        )

    async def get_entry(self, entry_id: int) -> Any:
        entry = await self._repo.get_by_id(entry_id)
        if entry is None:
            raise ResourceNotFoundException("audit_log", entry_id)
        return entry
