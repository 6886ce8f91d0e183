"""Change-audit recorder: field-level before/after history of business writes.

Registered as a write interceptor on every repository. For each create,
update and delete it appends one AuditLog row holding JSON snapshots of the
row before and after the write, plus the acting user and client address.

Prior state is read in an independent session before the write is flushed,
and the entry is appended in its own session and transaction on the audit
sink. Auditing is best-effort: every failure is logged at WARNING and
swallowed, so a business write is never blocked or rolled back because of it.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import inspect as sa_inspect, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.infrastructure.persistence.interceptors import BaseWriteInterceptor, WriteOperation
from app.infrastructure.persistence.introspection import (
    resolve_record_id,
    resolve_table_name,
    serialize_record,
)
from app.infrastructure.persistence.models.audit_log import AuditLog
from app.shared.enums import AuditAction
from app.shared.telemetry.logging import get_logger

logger = get_logger(__name__)

_STAGED_KEY = "change_audit.old_values"


class ChangeAuditRecorder(BaseWriteInterceptor):
    """Write interceptor that appends AuditLog entries.

    Args:
        session_factory: Business session factory; used for prior-state lookups.
        sink_factory: Session factory entries are appended through. Defaults to
            session_factory.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        sink_factory: async_sessionmaker[AsyncSession] | None = None,
    ) -> None:
        self._session_factory = session_factory
        self._sink_factory = sink_factory or session_factory

    def _should_audit(self, op: WriteOperation) -> tuple[str, int] | None:
        """Return (table_name, record_id) when the write is auditable, else None."""
        table_name = resolve_table_name(op.model)
        if not table_name or table_name == AuditLog.__tablename__:
            return None
        record_id = resolve_record_id(op.model, op.target, op.params)
        if record_id <= 0:
            return None
        return table_name, record_id

    async def after_create(self, op: WriteOperation) -> None:
        try:
            resolved = self._should_audit(op)
            if resolved is None:
                return
            table_name, record_id = resolved
            await self._append(
                op,
                table_name,
                record_id,
                AuditAction.CREATE,
                old_values="",
                new_values=serialize_record(op.target, op.model),
            )
        except Exception as e:
            self._warn(op, e)

    async def before_update(self, op: WriteOperation) -> None:
        await self._stage_prior_state(op)

    async def after_update(self, op: WriteOperation) -> None:
        try:
            resolved = self._should_audit(op)
            if resolved is None:
                return
            table_name, record_id = resolved
            old_values = await self._prior_state(op, record_id)
            await self._append(
                op,
                table_name,
                record_id,
                AuditAction.UPDATE,
                old_values=old_values,
                new_values=serialize_record(op.target, op.model),
            )
        except Exception as e:
            self._warn(op, e)

    async def before_delete(self, op: WriteOperation) -> None:
        await self._stage_prior_state(op)

    async def after_delete(self, op: WriteOperation) -> None:
        try:
            resolved = self._should_audit(op)
            if resolved is None:
                return
            table_name, record_id = resolved
            old_values = await self._prior_state(op, record_id)
            await self._append(
                op,
                table_name,
                record_id,
                AuditAction.DELETE,
                old_values=old_values,
                new_values="",
            )
        except Exception as e:
            self._warn(op, e)

    async def _stage_prior_state(self, op: WriteOperation) -> None:
        """Serialize the committed row into op.staged. Missing row -> nothing staged."""
        try:
            resolved = self._should_audit(op)
            if resolved is None:
                return
            _, record_id = resolved
            record = await self._load(op.model, record_id, include_deleted=False)
            if record is not None:
                op.staged[_STAGED_KEY] = serialize_record(record, op.model)
        except Exception as e:
            self._warn(op, e)

    async def _prior_state(self, op: WriteOperation, record_id: int) -> str:
        """Staged prior state, or a best-effort reload that ignores soft deletion."""
        if _STAGED_KEY in op.staged:
            return op.staged[_STAGED_KEY]
        # Runs after the business flush, so the row may already show the new values.
        record = await self._load(op.model, record_id, include_deleted=True)
        return serialize_record(record, op.model)

    async def _load(self, model: type[Any], record_id: int, *, include_deleted: bool) -> Any:
        pk_column = sa_inspect(model).primary_key[0]
        stmt = select(model).where(pk_column == record_id)
        if not include_deleted and hasattr(model, "deleted_at"):
            stmt = stmt.where(model.deleted_at.is_(None))
        async with self._session_factory() as session:
            result = await session.execute(stmt)
            return result.scalar_one_or_none()

    async def _append(
        self,
        op: WriteOperation,
        table_name: str,
        record_id: int,
        action: AuditAction,
        *,
        old_values: str,
        new_values: str,
    ) -> None:
        entry = AuditLog(
            table_name=table_name,
            record_id=record_id,
            action=action.value,
            old_values=old_values,
            new_values=new_values,
            user_id=op.context.user_id,
            ip=op.context.ip_address,
        )
        async with self._sink_factory() as session:
            async with session.begin():
                session.add(entry)
        logger.debug(
            "Recorded %s on %s id=%s (user_id=%s)",
            action.value,
            table_name,
            record_id,
            op.context.user_id,
        )

    def _warn(self, op: WriteOperation, error: Exception) -> None:
        logger.warning(
            "Failed to record %s audit entry for %s: %s",
            op.action.value,
            getattr(op.model, "__name__", op.model),
            str(error),
            exc_info=True,
        )
