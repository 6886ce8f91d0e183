"""Base repository: generic CRUD with write interceptors (change auditing)."""

from collections.abc import Sequence
from typing import Any, Generic, TypeVar

from sqlalchemy import delete as sa_delete, func, inspect as sa_inspect, select, update as sa_update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import object_session
from sqlalchemy.sql import Select

from app.domain.exceptions import ResourceNotFoundException
from app.infrastructure.persistence.database import Base
from app.infrastructure.persistence.interceptors import (
    WriteInterceptor,
    WriteOperation,
    run_after,
    run_before,
)
from app.shared.context import SYSTEM_CONTEXT, AuditContext
from app.shared.enums import AuditAction
from app.shared.utils.datetime import utc_now


ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """Base repository with get_by_id, get_page, create, update and delete.

    Every write builds a WriteOperation and runs the injected interceptors:
    before hooks ahead of the flush, after hooks once the flush succeeded.
    Models with a deleted_at column are soft-deleted and hidden from reads.
    """

    def __init__(
        self,
        db: AsyncSession,
        model: type[ModelType],
        interceptors: Sequence[WriteInterceptor] = (),
    ) -> None:
        self.db = db
        self.model = model
        self.interceptors: list[WriteInterceptor] = list(interceptors)

    @property
    def soft_delete(self) -> bool:
        return hasattr(self.model, "deleted_at")

    def _pk_column(self) -> Any:
        return sa_inspect(self.model).primary_key[0]

    def _live(self, stmt: Select) -> Select:
        """Add the soft-delete filter for models that have one."""
        if self.soft_delete:
            model: Any = self.model
            stmt = stmt.where(model.deleted_at.is_(None))
        return stmt

    async def get_by_id(
        self, entity_id: int, *, include_deleted: bool = False
    ) -> ModelType | None:
        """Return a single record by primary key, or None."""
        stmt = select(self.model).where(self._pk_column() == entity_id)
        if not include_deleted:
            stmt = self._live(stmt)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_or_404(self, entity_id: int, resource_type: str) -> ModelType:
        """Return a live record by primary key or raise ResourceNotFoundException."""
        obj = await self.get_by_id(entity_id)
        if obj is None:
            raise ResourceNotFoundException(resource_type, entity_id)
        return obj

    async def get_page(
        self,
        skip: int = 0,
        limit: int = 100,
        *,
        options: Sequence[Any] = (),
    ) -> tuple[list[ModelType], int]:
        """Return (records, total) for live rows ordered by primary key."""
        total = await self.db.scalar(
            self._live(select(func.count()).select_from(self.model))
        )
        stmt = (
            self._live(select(self.model))
            .options(*options)
            .order_by(self._pk_column())
            .offset(skip)
            .limit(limit)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all()), int(total or 0)

    def _operation(
        self,
        action: AuditAction,
        target: Any = None,
        params: tuple[Any, ...] = (),
        ctx: AuditContext | None = None,
    ) -> WriteOperation:
        return WriteOperation(
            action=action,
            model=self.model,
            target=target,
            params=params,
            context=ctx or SYSTEM_CONTEXT,
        )

    async def create(self, obj: ModelType, ctx: AuditContext | None = None) -> ModelType:
        """Persist a new record and run the create hooks."""
        op = self._operation(AuditAction.CREATE, obj, ctx=ctx)
        await run_before(self.interceptors, op)
        self.db.add(obj)
        await self.db.flush()
        await self.db.refresh(obj)
        await run_after(self.interceptors, op)
        return obj

    async def update(self, obj: ModelType, ctx: AuditContext | None = None) -> ModelType:
        """Flush pending changes on a record and run the update hooks.

        The record must already be attached to this session (load it with
        get_by_id / get_or_404 first).
        """
        if object_session(obj) is not self.db.sync_session:
            raise ValueError(
                f"Cannot update: {self.model.__name__} instance is not attached to this session."
            )
        op = self._operation(AuditAction.UPDATE, obj, ctx=ctx)
        await run_before(self.interceptors, op)
        await self.db.flush()
        await self.db.refresh(obj)
        await run_after(self.interceptors, op)
        return obj

    async def delete(self, obj: ModelType, ctx: AuditContext | None = None) -> None:
        """Delete a record (soft delete when the model supports it) and run the delete hooks."""
        op = self._operation(AuditAction.DELETE, obj, ctx=ctx)
        await run_before(self.interceptors, op)
        if self.soft_delete:
            record: Any = obj
            record.deleted_at = utc_now()
        else:
            await self.db.delete(obj)
        await self.db.flush()
        await run_after(self.interceptors, op)

    async def delete_by_id(self, entity_id: int, ctx: AuditContext | None = None) -> bool:
        """Delete by primary key without loading the record. Returns False if no row matched."""
        op = self._operation(AuditAction.DELETE, params=(entity_id,), ctx=ctx)
        await run_before(self.interceptors, op)
        pk = self._pk_column()
        if self.soft_delete:
            model: Any = self.model
            stmt = (
                sa_update(self.model)
                .where(pk == entity_id, model.deleted_at.is_(None))
                .values(deleted_at=utc_now())
            )
        else:
            stmt = sa_delete(self.model).where(pk == entity_id)
        result = await self.db.execute(stmt.execution_options(synchronize_session=False))
        if not result.rowcount:
            return False
        await run_after(self.interceptors, op)
        return True
