"""Persistence: async engines, session factories, and Base for SQLAlchemy ORM.

Schema is managed by Alembic migrations (or create_all when DB_AUTO_MIGRATE
is set, see app.core.lifespan).

Two engines exist:

- the business engine (DATABASE_URL) used by request sessions and by the
  change-audit recorder for its before-image lookups;
- the audit sink engine (AUDIT_DATABASE_URL) that audit entries are
  appended through. When AUDIT_DATABASE_URL is empty the sink shares the
  business engine, except on SQLite: a file database takes a single writer,
  so the sink moves to a sibling file (rbac.db -> rbac.audit.db) and an
  in-memory database is refused.

Engines and session factories are created lazily on first use (get_db /
get_db_transactional / ensure_engines) so import does not trigger Settings
validation.
"""

import logging
import os

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import NullPool

from app.core.config import get_settings
from app.domain.exceptions import SqlNotConfiguredException

logger = logging.getLogger(__name__)

# Set by _ensure_engine() on first use; avoids get_settings() at import time.
engine: AsyncEngine | None = None
AsyncSessionLocal: async_sessionmaker[AsyncSession] | None = None
audit_engine: AsyncEngine | None = None
AuditSessionLocal: async_sessionmaker[AsyncSession] | None = None
# True when the audit sink is a SQLite file derived from DATABASE_URL.
audit_sink_derived: bool = False


def _create_engine(url: str, echo: bool) -> AsyncEngine:
    """Build an async engine; SQLite gets NullPool so every session owns a connection."""
    settings = get_settings()
    if url.startswith("sqlite"):
        return create_async_engine(
            url,
            echo=echo,
            poolclass=NullPool,
            connect_args={"check_same_thread": False},
        )
    pool_size = settings.db_pool_size if settings.db_pool_size is not None else 20
    max_overflow = (
        settings.db_max_overflow if settings.db_max_overflow is not None else 30
    )
    return create_async_engine(
        url,
        echo=echo,
        pool_pre_ping=True,
        pool_size=pool_size,
        max_overflow=max_overflow,
        pool_recycle=3600,
    )


def _session_factory(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind=bind,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
        autocommit=False,
    )


def audit_sink_url(database_url: str, audit_database_url: str = "") -> str:
    """URL the audit sink connects to, or "" when it shares the business engine.

    Raises:
        ValueError: SQLite in-memory business database without AUDIT_DATABASE_URL.
    """
    if audit_database_url and audit_database_url != database_url:
        return audit_database_url
    url = make_url(database_url)
    if url.get_backend_name() != "sqlite":
        return ""
    if not url.database or url.database == ":memory:" or url.query.get("mode") == "memory":
        raise ValueError(
            "AUDIT_DATABASE_URL is required when DATABASE_URL is an in-memory SQLite database"
        )
    root, ext = os.path.splitext(url.database)
    sibling = url.set(database=f"{root}.audit{ext or '.db'}")
    return sibling.render_as_string(hide_password=False)


def _ensure_engine() -> None:
    """Create engines and session factories on first use."""
    global engine, AsyncSessionLocal, audit_engine, AuditSessionLocal, audit_sink_derived
    if AsyncSessionLocal is not None:
        return
    settings = get_settings()
    sink_url = audit_sink_url(settings.database_url, settings.audit_database_url)
    engine = _create_engine(settings.database_url, settings.database_echo)
    AsyncSessionLocal = _session_factory(engine)
    if sink_url:
        audit_engine = _create_engine(sink_url, settings.database_echo)
        AuditSessionLocal = _session_factory(audit_engine)
        audit_sink_derived = sink_url != settings.audit_database_url
    else:
        audit_engine = engine
        AuditSessionLocal = AsyncSessionLocal
        audit_sink_derived = False
    if audit_sink_derived:
        logger.info("SQLite audit sink: %s", make_url(sink_url).database)
    logger.debug("Database engines ready (separate audit sink: %s)", audit_engine is not engine)


def ensure_engines() -> tuple[async_sessionmaker[AsyncSession], async_sessionmaker[AsyncSession]]:
    """Return (business session factory, audit sink session factory), building them if needed."""
    _ensure_engine()
    if AsyncSessionLocal is None or AuditSessionLocal is None:
        raise SqlNotConfiguredException()
    return AsyncSessionLocal, AuditSessionLocal


async def dispose_engines() -> None:
    """Dispose both engines and forget the factories (shutdown, tests)."""
    global engine, AsyncSessionLocal, audit_engine, AuditSessionLocal, audit_sink_derived
    if audit_engine is not None and audit_engine is not engine:
        await audit_engine.dispose()
    if engine is not None:
        await engine.dispose()
    engine = None
    AsyncSessionLocal = None
    audit_engine = None
    AuditSessionLocal = None
    audit_sink_derived = False


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy declarative models."""


async def get_db():
    """Database session dependency for read operations.

    Does not commit; use get_db_transactional for writes.
    Yields a session and closes it on exit.
    """
    session_factory, _ = ensure_engines()
    async with session_factory() as session:
        yield session


async def get_db_transactional():
    """Database session dependency for write operations.

    Begins a transaction, commits on success, rolls back on exception.
    Use for POST, PUT, PATCH, DELETE endpoints.
    """
    session_factory, _ = ensure_engines()
    async with session_factory() as session:
        async with session.begin():
            yield session
