"""Alembic environment configuration with async support.

target_metadata is the application's Base.metadata so autogenerate sees
every model. The URL is read from DATABASE_URL (falling back to
alembic.ini). Set ALEMBIC_TARGET=audit to migrate a separate audit sink
database (AUDIT_DATABASE_URL, or the sibling file a SQLite DATABASE_URL
implies); only the audit_logs table is managed there.
"""

import asyncio
import os
from logging.config import fileConfig

from alembic import context
from sqlalchemy import pool
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import async_engine_from_config

from app.infrastructure.persistence.database import Base, audit_sink_url
from app.infrastructure.persistence.models import AuditLog  # noqa: F401  registers all models

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata

AUDIT_TARGET = os.environ.get("ALEMBIC_TARGET", "").lower() == "audit"


def get_database_url() -> str:
    """Database URL from the environment, then alembic.ini.

    Plain postgresql:// URLs are switched to the asyncpg driver.
    """
    url = os.environ.get("DATABASE_URL") or config.get_main_option("sqlalchemy.url", "")
    if AUDIT_TARGET and url:
        url = audit_sink_url(url, os.environ.get("AUDIT_DATABASE_URL", "")) or url
    if url.startswith("postgresql://"):
        url = url.replace("postgresql://", "postgresql+asyncpg://", 1)
    return url


def include_object(obj, name, type_, reflected, compare_to) -> bool:
    """Restrict the audit sink database to the audit_logs table."""
    if AUDIT_TARGET and type_ == "table":
        return name == AuditLog.__tablename__
    return True


def run_migrations_offline() -> None:
    """Run migrations in 'offline' mode (emit SQL without connecting)."""
    context.configure(
        url=get_database_url(),
        target_metadata=target_metadata,
        include_object=include_object,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        render_as_batch=True,
    )

    with context.begin_transaction():
        context.run_migrations(audit_only=AUDIT_TARGET)


def do_run_migrations(connection: Connection) -> None:
    context.configure(
        connection=connection,
        target_metadata=target_metadata,
        include_object=include_object,
        render_as_batch=connection.dialect.name == "sqlite",
    )

    with context.begin_transaction():
        context.run_migrations(audit_only=AUDIT_TARGET)


async def run_async_migrations() -> None:
    configuration = config.get_section(config.config_ini_section, {})
    configuration["sqlalchemy.url"] = get_database_url()

    connectable = async_engine_from_config(
        configuration,
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )

    async with connectable.connect() as connection:
        await connection.run_sync(do_run_migrations)

    await connectable.dispose()


def run_migrations_online() -> None:
    asyncio.run(run_async_migrations())


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
