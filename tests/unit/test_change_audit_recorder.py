"""Tests for ChangeAuditRecorder against real SQLite sessions.

Writes go through the repositories (the same path the API uses) with the
recorder registered as their interceptor.
"""

import json
import logging

import pytest
from sqlalchemy import String, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from app.infrastructure.persistence import database
from app.infrastructure.persistence.interceptors import WriteOperation, run_after, run_before
from app.infrastructure.persistence.models import AuditLog, Role
from app.infrastructure.persistence.repositories import BaseRepository, RoleRepository
from app.infrastructure.services.change_audit_recorder import ChangeAuditRecorder
from app.shared.context import AuditContext
from app.shared.enums import AuditAction

CTX = AuditContext(user_id=7, ip_address="10.0.0.5")


class _KeyedBase(DeclarativeBase):
    pass


class Setting(_KeyedBase):
    """Keyed by a string, so no positive integer record id can be derived."""

    __tablename__ = "settings"

    key: Mapped[str] = mapped_column(String(50), primary_key=True)
    value: Mapped[str] = mapped_column(String(100), default="")


async def _entries(sink_factory) -> list[AuditLog]:
    async with sink_factory() as session:
        result = await session.execute(select(AuditLog).order_by(AuditLog.id))
        return list(result.scalars().all())


async def _create_role(session_factory, recorder, name: str = "editor") -> int:
    async with session_factory() as session:
        async with session.begin():
            repo = RoleRepository(session, [recorder])
            role = await repo.create_role(name, name.title(), "", CTX)
            return role.id


@pytest.fixture
def recorder(session_factories) -> ChangeAuditRecorder:
    session_factory, sink_factory = session_factories
    return ChangeAuditRecorder(session_factory, sink_factory)


async def test_create_appends_entry_with_context(session_factories, recorder) -> None:
    session_factory, sink_factory = session_factories
    role_id = await _create_role(session_factory, recorder)

    [entry] = await _entries(sink_factory)
    assert entry.table_name == "roles"
    assert entry.record_id == role_id
    assert entry.action == "create"
    assert entry.old_values == ""
    assert json.loads(entry.new_values)["name"] == "editor"
    assert entry.user_id == 7
    assert entry.ip == "10.0.0.5"


async def test_update_old_values_are_committed_state(session_factories, recorder) -> None:
    session_factory, sink_factory = session_factories
    role_id = await _create_role(session_factory, recorder)

    async with session_factory() as session:
        async with session.begin():
            repo = RoleRepository(session, [recorder])
            role = await repo.get_or_404(role_id, "role")
            role.description = "changed in memory first"
            await repo.update(role, CTX)

    entry = (await _entries(sink_factory))[-1]
    assert entry.action == "update"
    assert json.loads(entry.old_values)["description"] == ""
    assert json.loads(entry.new_values)["description"] == "changed in memory first"


async def test_delete_by_id_uses_param_as_record_id(session_factories, recorder) -> None:
    session_factory, sink_factory = session_factories
    role_id = await _create_role(session_factory, recorder)

    async with session_factory() as session:
        async with session.begin():
            deleted = await RoleRepository(session, [recorder]).delete_by_id(role_id, CTX)
    assert deleted is True

    entry = (await _entries(sink_factory))[-1]
    assert entry.action == "delete"
    assert entry.record_id == role_id
    assert json.loads(entry.old_values)["name"] == "editor"
    assert entry.new_values == ""


async def test_delete_of_missing_row_records_nothing(session_factories, recorder) -> None:
    session_factory, sink_factory = session_factories
    async with session_factory() as session:
        async with session.begin():
            deleted = await RoleRepository(session, [recorder]).delete_by_id(404, CTX)
    assert deleted is False
    assert await _entries(sink_factory) == []


async def test_audit_log_writes_are_never_audited(session_factories, recorder) -> None:
    _, sink_factory = session_factories
    entry = AuditLog(table_name="roles", record_id=1, action="create")
    op = WriteOperation(action=AuditAction.CREATE, model=AuditLog, target=entry, context=CTX)
    await recorder.after_create(op)
    assert await _entries(sink_factory) == []


async def test_unresolvable_record_id_is_skipped(session_factories, recorder) -> None:
    _, sink_factory = session_factories
    op = WriteOperation(action=AuditAction.DELETE, model=Role, params=("not-an-id",))
    await run_before([recorder], op)
    await run_after([recorder], op)
    assert op.staged == {}
    assert await _entries(sink_factory) == []


async def test_repository_write_with_unresolvable_id_succeeds_unrecorded(
    session_factories, recorder
) -> None:
    session_factory, sink_factory = session_factories
    async with database.engine.begin() as conn:
        await conn.run_sync(_KeyedBase.metadata.create_all)

    async with session_factory() as session:
        async with session.begin():
            repo = BaseRepository(session, Setting, [recorder])
            setting = await repo.create(Setting(key="theme", value="dark"), CTX)
            setting.value = "light"
            await repo.update(setting, CTX)
            await repo.delete(setting, CTX)
            await repo.create(Setting(key="locale", value="en"), CTX)

    async with session_factory() as session:
        assert (await session.get(Setting, "locale")).value == "en"
        assert await session.get(Setting, "theme") is None
    assert await _entries(sink_factory) == []


async def test_unmapped_model_is_skipped(session_factories, recorder) -> None:
    _, sink_factory = session_factories
    op = WriteOperation(action=AuditAction.UPDATE, model=dict, params=(1,))
    await run_before([recorder], op)
    await run_after([recorder], op)
    assert await _entries(sink_factory) == []


async def test_update_without_staged_state_reloads_prior_row(
    session_factories, recorder
) -> None:
    """An after hook with nothing staged falls back to a fresh read of the row."""
    session_factory, sink_factory = session_factories
    role_id = await _create_role(session_factory, recorder)

    async with session_factory() as session:
        role = await session.get(Role, role_id)
    op = WriteOperation(action=AuditAction.UPDATE, model=Role, target=role, context=CTX)
    await recorder.after_update(op)

    entry = (await _entries(sink_factory))[-1]
    assert entry.action == "update"
    assert json.loads(entry.old_values)["id"] == role_id


async def test_broken_sink_never_breaks_the_write(session_factories, caplog) -> None:
    session_factory, sink_factory = session_factories

    def broken_sink():
        raise RuntimeError("sink is down")

    recorder = ChangeAuditRecorder(session_factory, broken_sink)

    with caplog.at_level(logging.WARNING):
        role_id = await _create_role(session_factory, recorder)
        async with session_factory() as session:
            async with session.begin():
                repo = RoleRepository(session, [recorder])
                role = await repo.get_or_404(role_id, "role")
                role.display_name = "Still saved"
                await repo.update(role, CTX)

    async with session_factory() as session:
        assert (await session.get(Role, role_id)).display_name == "Still saved"
    assert await _entries(sink_factory) == []
    assert any(
        record.levelno == logging.WARNING and "sink is down" in record.getMessage()
        for record in caplog.records
    )


async def test_failed_flush_reaches_no_after_hook(session_factories, recorder) -> None:
    """A statement that fails (unique name) produces no entry for the failed write."""
    session_factory, sink_factory = session_factories
    await _create_role(session_factory, recorder, "editor")

    async with session_factory() as session:
        with pytest.raises(IntegrityError):
            async with session.begin():
                repo = RoleRepository(session, [recorder])
                await repo.create(Role(name="editor", display_name="Dup"), CTX)

    async with sink_factory() as session:
        count = await session.scalar(select(func.count()).select_from(AuditLog))
    assert count == 1


def test_audit_log_rows_are_immutable() -> None:
    from app.infrastructure.persistence.models import audit_log

    entry = AuditLog(table_name="roles", record_id=1, action="create")
    with pytest.raises(ValueError):
        audit_log._prevent_audit_log_updates(None, None, entry)
    with pytest.raises(ValueError):
        audit_log._prevent_audit_log_deletes(None, None, entry)


def test_audit_log_table_name_fits_long_table_names() -> None:
    assert AuditLog.__table__.c.table_name.type.length == 100
    assert AuditLog.__table__.c.ip.type.length == 50
