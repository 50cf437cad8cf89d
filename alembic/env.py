"""
Alembic Migration Environment
===============================

What:  Applies the `task` table migrations.
How:   The URL comes from `alembic -x database_url=...` when given, otherwise
       from application settings. Online runs borrow a `Database` handle
       (NullPool, so nothing outlives the command) and hand its connection
       to Alembic through `run_sync`.

Usage:
    alembic upgrade head
    alembic -x database_url=sqlite+aiosqlite:///./local.db upgrade head
    alembic upgrade head --sql        # offline: print the DDL only
"""

import asyncio
from logging.config import fileConfig

from alembic import context
from sqlalchemy.pool import NullPool

from todomvc.config import settings
from todomvc.database import Base, Database
from todomvc.models.task import Task  # noqa: F401

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

database_url = context.get_x_argument(as_dictionary=True).get(
    "database_url", settings.database_url
)


def _configure(**kwargs) -> None:
    context.configure(
        target_metadata=Base.metadata,
        compare_type=True,
        render_as_batch=database_url.startswith("sqlite"),
        **kwargs,
    )


def run_migrations_offline() -> None:
    _configure(
        url=database_url,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def _migrate(connection) -> None:
    _configure(connection=connection)
    with context.begin_transaction():
        context.run_migrations()


async def run_migrations_online() -> None:
    database = Database(database_url, poolclass=NullPool)
    try:
        async with database.engine.connect() as connection:
            await connection.run_sync(_migrate)
    finally:
        await database.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    asyncio.run(run_migrations_online())
