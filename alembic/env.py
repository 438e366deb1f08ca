"""Alembic environment for the pollbox schema.

The database URL comes from, in order: ``alembic -x url=...``, a
``sqlalchemy.url`` set on the Alembic config, or the pollbox
configuration files (``[database] url``).
"""

import asyncio
import os
from logging.config import fileConfig

from alembic import context
from sqlalchemy import create_engine, pool
from sqlalchemy.ext.asyncio import create_async_engine

from pollbox.storage.models import Base

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name, disable_existing_loggers=False)

target_metadata = Base.metadata

_ASYNC_DRIVERS = ("+aiosqlite", "+asyncpg")


def database_url() -> str:
    """Resolve the target URL with ``~`` expanded."""
    url = context.get_x_argument(as_dictionary=True).get("url")
    if not url:
        url = config.get_main_option("sqlalchemy.url")
    if not url:
        from pollbox.config.loader import load_config

        url = load_config().database.url
    if ":///" in url:
        prefix, path = url.split(":///", 1)
        url = f"{prefix}:///{os.path.expanduser(path)}"
    return url


def _configure_and_run(connection) -> None:  # type: ignore[no-untyped-def]
    context.configure(
        connection=connection,
        target_metadata=target_metadata,
        render_as_batch=connection.dialect.name == "sqlite",
    )
    with context.begin_transaction():
        context.run_migrations()


def run_offline(url: str) -> None:
    """Emit SQL to stdout instead of touching a database."""
    context.configure(
        url=url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


async def run_async(url: str) -> None:
    engine = create_async_engine(url, poolclass=pool.NullPool)
    try:
        async with engine.connect() as connection:
            await connection.run_sync(_configure_and_run)
    finally:
        await engine.dispose()


def run_online(url: str) -> None:
    if url.split(":", 1)[0].endswith(_ASYNC_DRIVERS):
        asyncio.run(run_async(url))
        return
    engine = create_engine(url, poolclass=pool.NullPool)
    try:
        with engine.connect() as connection:
            _configure_and_run(connection)
    finally:
        engine.dispose()


if context.is_offline_mode():
    run_offline(database_url())
else:
    run_online(database_url())
