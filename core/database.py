"""
Async database access for events, pools and notification logs.

One engine per process, created on first use from DATABASE_URL.
"""

import os
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine, create_async_engine

_engine: AsyncEngine | None = None


def _database_url(driver: str) -> str:
    """DATABASE_URL with the given postgres driver, e.g. postgresql+asyncpg://."""
    database_url = os.environ.get("DATABASE_URL", "")
    for prefix in ("postgresql+asyncpg://", "postgresql://"):
        if database_url.startswith(prefix):
            return driver + database_url[len(prefix):]
    raise ValueError("DATABASE_URL must be a postgresql:// URL")


def get_engine() -> AsyncEngine:
    """Get or create the async engine."""
    global _engine
    if _engine is None:
        _engine = create_async_engine(
            _database_url("postgresql+asyncpg://"),
            pool_size=5,
            max_overflow=10,
            pool_recycle=1800,
        )
    return _engine


@asynccontextmanager
async def get_connection() -> AsyncGenerator[AsyncConnection, None]:
    """Pooled connection for reads."""
    async with get_engine().connect() as conn:
        yield conn


@asynccontextmanager
async def get_transaction() -> AsyncGenerator[AsyncConnection, None]:
    """Connection in a transaction; commits on success, rolls back on exception."""
    async with get_engine().begin() as conn:
        yield conn


@asynccontextmanager
async def get_serializable_transaction(
    lock_timeout_ms: int = 5000,
) -> AsyncGenerator[AsyncConnection, None]:
    """
    Transaction at SERIALIZABLE isolation with a bounded lock wait.

    Concurrent writers to the same rows fail with a serialization error
    (SQLSTATE 40001) instead of both committing. Lock waits longer than
    lock_timeout_ms fail with SQLSTATE 55P03.

    The overall duration is bounded by the caller (asyncio.wait_for);
    cancellation rolls the transaction back.
    """
    async with get_engine().connect() as conn:
        conn = await conn.execution_options(isolation_level="SERIALIZABLE")
        async with conn.begin():
            if conn.dialect.name == "postgresql":
                await conn.execute(
                    text(f"SET LOCAL lock_timeout = '{int(lock_timeout_ms)}ms'")
                )
            yield conn


async def close_engine() -> None:
    """Dispose of the engine. Call on shutdown."""
    global _engine
    if _engine is not None:
        await _engine.dispose()
        _engine = None


def is_configured() -> bool:
    """Check if database credentials are configured."""
    return bool(os.environ.get("DATABASE_URL"))


def get_sync_database_url() -> str:
    """psycopg2 URL for Alembic, which runs migrations synchronously."""
    return _database_url("postgresql://")
