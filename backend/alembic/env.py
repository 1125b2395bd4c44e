"""
Alembic Migration Environment
==============================

What:  Runs SubTrack's schema migrations through the async engine.
How:   The URL comes from application settings (DATABASE_URL), or from
       `alembic -x db_url=... upgrade head` for one-off targets.

    cd backend
    alembic upgrade head          # apply
    alembic downgrade -1          # roll back one revision
    alembic upgrade head --sql    # print SQL without connecting
"""

import asyncio
from logging.config import fileConfig

from alembic import context
from sqlalchemy import pool
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import async_engine_from_config

from subtrack.config import settings
from subtrack.database import Base
from subtrack.models.subscription import Subscription  # noqa: F401  (registers the table)

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def _database_url() -> str:
    return context.get_x_argument(as_dictionary=True).get("db_url", settings.database_url)


config.set_main_option("sqlalchemy.url", _database_url())


def _configure(**kwargs) -> None:
    # compare_type catches Numeric precision and TIMESTAMP timezone drift
    context.configure(target_metadata=target_metadata, compare_type=True, **kwargs)


def run_migrations_offline() -> None:
    """Emit the migration SQL to stdout."""
    _configure(
        url=config.get_main_option("sqlalchemy.url"),
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def _run_sync(connection: Connection) -> None:
    _configure(connection=connection)
    with context.begin_transaction():
        context.run_migrations()


async def run_migrations_online() -> None:
    """Connect once (no pooling) and apply pending revisions."""
    engine = async_engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )
    try:
        async with engine.connect() as connection:
            await connection.run_sync(_run_sync)
    finally:
        await engine.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    asyncio.run(run_migrations_online())
