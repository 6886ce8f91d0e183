"""Audit log repository. Read-only; entries are appended by the change-audit recorder."""

from __future__ import annotations

from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.infrastructure.persistence.models.audit_log import AuditLog


class AuditLogRepository:
    """Query audit log entries. No create/update/delete."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def get_by_id(self, entry_id: int) -> AuditLog | None:
        result = await self.db.execute(select(AuditLog).where(AuditLog.id == entry_id))
        return result.scalar_one_or_none()

    async def list(
        self,
        *,
        skip: int = 0,
        limit: int = 100,
        table_name: str | None = None,
        record_id: int | None = None,
        action: str | None = None,
        user_id: int | None = None,
    ) -> tuple[list[AuditLog], int]:
        """List entries with optional filters (newest first); return (entries, total)."""
        conditions: list[Any] = []
        if table_name is not None:
            conditions.append(AuditLog.table_name == table_name)
        if record_id is not None:
            conditions.append(AuditLog.record_id == record_id)
        if action is not None:
            conditions.append(AuditLog.action == action)
        if user_id is not None:
            conditions.append(AuditLog.user_id == user_id)
        total = await self.db.scalar(
            select(func.count()).select_from(AuditLog).where(*conditions)
        )
        result = await self.db.execute(
            select(AuditLog)
            .where(*conditions)
            .order_by(AuditLog.id.desc())
            .offset(skip)
            .limit(limit)
        )
        return list(result.scalars().all()), int(total or 0)
