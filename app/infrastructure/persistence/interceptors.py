"""Write interceptors: before/after hooks around every repository write.

BaseRepository builds one WriteOperation per mutating statement and runs
every registered interceptor's before hook ahead of the flush and its after
hook once the flush has succeeded. A statement that fails never reaches the
after hooks.

The acting user and client address travel on the operation (AuditContext),
handed down explicitly from the HTTP layer.
"""

from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable

from app.shared.context import SYSTEM_CONTEXT, AuditContext
from app.shared.enums import AuditAction


@dataclass
class WriteOperation:
    """One mutating statement as seen by interceptors.

    Attributes:
        action: create, update or delete.
        model: Mapped ORM class the statement targets.
        target: The record, a list of records, or None (delete by id).
        params: Bound statement values, e.g. (id,) for a delete by id.
        context: Acting user and client address for the request.
        staged: Scratch space that correlates a before hook with its after hook.
    """

    action: AuditAction
    model: type[Any]
    target: Any = None
    params: tuple[Any, ...] = ()
    context: AuditContext = SYSTEM_CONTEXT
    staged: dict[str, Any] = field(default_factory=dict)


@runtime_checkable
class WriteInterceptor(Protocol):
    """Hooks called around repository writes."""

    async def before_create(self, op: WriteOperation) -> None: ...

    async def after_create(self, op: WriteOperation) -> None: ...

    async def before_update(self, op: WriteOperation) -> None: ...

    async def after_update(self, op: WriteOperation) -> None: ...

    async def before_delete(self, op: WriteOperation) -> None: ...

    async def after_delete(self, op: WriteOperation) -> None: ...


class BaseWriteInterceptor:
    """No-op implementation; subclasses override the hooks they need."""

    async def before_create(self, op: WriteOperation) -> None:
        return None

    async def after_create(self, op: WriteOperation) -> None:
        return None

    async def before_update(self, op: WriteOperation) -> None:
        return None

    async def after_update(self, op: WriteOperation) -> None:
        return None

    async def before_delete(self, op: WriteOperation) -> None:
        return None

    async def after_delete(self, op: WriteOperation) -> None:
        return None


async def run_before(interceptors: list[WriteInterceptor], op: WriteOperation) -> None:
    """Run the before hook matching op.action on each interceptor, in order."""
    for interceptor in interceptors:
        await getattr(interceptor, f"before_{op.action.value}")(op)


async def run_after(interceptors: list[WriteInterceptor], op: WriteOperation) -> None:
    """Run the after hook matching op.action on each interceptor, in order."""
    for interceptor in interceptors:
        await getattr(interceptor, f"after_{op.action.value}")(op)
