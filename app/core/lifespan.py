"""Application lifespan: startup and shutdown.

Single place for all startup/shutdown logic. Used by main.py; no business
logic here, only wiring of infrastructure (logging, DB engines, optional
table creation, the change-audit recorder, engine dispose).
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from app.core.config import get_settings
from app.infrastructure.persistence import database
from app.infrastructure.persistence.models import AuditLog
from app.infrastructure.services.change_audit_recorder import ChangeAuditRecorder
from app.shared.telemetry.logging import setup_logging

logger = logging.getLogger(__name__)


async def _create_tables() -> None:
    """create_all on the business database and the audit table on the audit sink."""
    async with database.engine.begin() as conn:
        await conn.run_sync(database.Base.metadata.create_all)
    if database.audit_engine is not database.engine:
        await _create_audit_table()


async def _create_audit_table() -> None:
    async with database.audit_engine.begin() as conn:
        await conn.run_sync(database.Base.metadata.create_all, tables=[AuditLog.__table__])


@asynccontextmanager
async def create_lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Run startup then yield; on exit run shutdown.

    Startup order: logging, DB engines, table creation (DB_AUTO_MIGRATE; the
    audit table on a derived SQLite sink is always created),
    change-audit recorder (AUDIT_ENABLED). Shutdown: engine dispose.
    """
    settings = get_settings()

    # ---- Startup ----
    setup_logging(settings)
    session_factory, sink_factory = database.ensure_engines()

    if settings.db_auto_migrate:
        await _create_tables()
        logger.info("Database tables ensured")
    elif database.audit_sink_derived:
        await _create_audit_table()

    if settings.audit_enabled:
        app.state.audit_recorder = ChangeAuditRecorder(session_factory, sink_factory)
        logger.info(
            "Change audit enabled (sink: %s)",
            "separate database" if sink_factory is not session_factory else "main database",
        )
    else:
        app.state.audit_recorder = None
        logger.info("Change audit disabled")

    yield

    # ---- Shutdown ----
    await database.dispose_engines()
    logger.info("Database engines disposed")
