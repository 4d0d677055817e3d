"""
PostgreSQL connection helpers.

One asyncpg pool per process, created lazily. Every connection registers the
pgvector codec so ``vector`` columns round-trip as numpy arrays / lists.
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import asyncpg
from pgvector.asyncpg import register_vector

logger = logging.getLogger(__name__)

_pool: Optional[asyncpg.Pool] = None
_pool_lock: Optional[asyncio.Lock] = None


async def _init_connection(conn: asyncpg.Connection) -> None:
    # The codec lookup needs the type, so the extension must exist first.
    await conn.execute("CREATE EXTENSION IF NOT EXISTS vector")
    await register_vector(conn)


async def create_pool(
    dsn: str, min_size: int = 1, max_size: int = 10
) -> asyncpg.Pool:
    """Create a new pool with pgvector support."""
    return await asyncpg.create_pool(
        dsn,
        min_size=min_size,
        max_size=max_size,
        init=_init_connection,
    )


async def get_pool() -> asyncpg.Pool:
    global _pool, _pool_lock
    if _pool is not None:
        return _pool
    if _pool_lock is None:
        _pool_lock = asyncio.Lock()
    async with _pool_lock:
        if _pool is None:
            # Import settings lazily to ensure env vars are loaded
            from myawesomelist.config import settings

            dsn = settings.get_dsn()
            logger.info("Initializing Postgres pool for %s", _redact(dsn))
            _pool = await create_pool(
                dsn,
                min_size=settings.DB_POOL_MIN_SIZE,
                max_size=settings.DB_POOL_MAX_SIZE,
            )
    return _pool


async def close_pool() -> None:
    global _pool, _pool_lock
    if _pool is not None:
        await _pool.close()
        _pool = None
    _pool_lock = None


@asynccontextmanager
async def get_transaction(pool: asyncpg.Pool) -> AsyncIterator[asyncpg.Connection]:
    """
    Service-level transaction helper.

    Use this for writes spanning several tables that must be applied
    together. Everything executed on the yielded connection is committed on
    normal exit and rolled back if the block raises (including on
    cancellation).

    Usage:
        async with get_transaction(pool) as conn:
            ids = await repo_repo.upsert_many(conn, refs)
            await collection_repo.upsert(conn, ids[0].id, "Go")
    """
    async with pool.acquire() as conn:
        async with conn.transaction():
            yield conn


async def ping(pool: asyncpg.Pool) -> None:
    async with pool.acquire() as conn:
        await conn.fetchval("SELECT 1")


def _redact(dsn: str) -> str:
    """Hide the password part of a DSN for logging."""
    if "@" not in dsn or "://" not in dsn:
        return dsn
    scheme, rest = dsn.split("://", 1)
    creds, host = rest.rsplit("@", 1)
    user = creds.split(":", 1)[0]
    return f"{scheme}://{user}:***@{host}" if ":" in creds else dsn
