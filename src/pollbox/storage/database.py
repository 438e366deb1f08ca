"""Engine and session factory construction."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from sqlalchemy import event
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from pollbox.storage.models import Base

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

    from pollbox.config.schema import DatabaseConfig


async def create_db(
    config: DatabaseConfig,
) -> tuple[async_sessionmaker[AsyncSession], AsyncEngine]:
    """Create async engine and sessionmaker from config."""
    url = config.url
    if "~" in url:
        url = url.replace("~", str(Path.home()))

    # Ensure parent directory exists for sqlite
    if url.startswith("sqlite"):
        db_path = url.split("///")[-1] if "///" in url else ""
        if db_path and db_path != ":memory:":
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)

    engine_kwargs: dict[str, object] = {}
    if url.startswith("sqlite"):
        if ":memory:" in url or url.endswith("://"):
            # In-memory SQLite needs StaticPool so all queries share
            # the same connection (and thus the same in-memory DB).
            from sqlalchemy.pool import StaticPool

            engine_kwargs["poolclass"] = StaticPool
            engine_kwargs["connect_args"] = {"check_same_thread": False}
        else:
            from sqlalchemy.pool import NullPool

            engine_kwargs["poolclass"] = NullPool
    else:
        engine_kwargs["pool_size"] = config.pool_size
        engine_kwargs["max_overflow"] = config.max_overflow
        engine_kwargs["pool_timeout"] = config.pool_timeout
        engine_kwargs["pool_recycle"] = config.pool_recycle
        engine_kwargs["pool_pre_ping"] = True

    engine = create_async_engine(url, **engine_kwargs)

    # Enable foreign keys for SQLite
    if url.startswith("sqlite"):

        @event.listens_for(engine.sync_engine, "connect")
        def _enable_fks(dbapi_conn, connection_record):  # type: ignore[no-untyped-def]
            cursor = dbapi_conn.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    # Only use create_all for in-memory SQLite (tests/dev).
    # File-based SQLite and PostgreSQL are managed by alembic migrations.
    is_memory = url.startswith("sqlite") and (":memory:" in url or url.endswith("://"))
    if is_memory:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    factory = async_sessionmaker(engine, expire_on_commit=False)
    return factory, engine
