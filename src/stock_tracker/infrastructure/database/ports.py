"""
Database port and its asyncpg implementation.

Repositories depend on IDatabaseAdapter only, so tests can hand them a mock.
"""

from typing import Any, Protocol

import asyncpg

from stock_tracker.config.state import DatabaseConfig
from stock_tracker.infrastructure.observability import get_database_logger


class IDatabaseAdapter(Protocol):
    """Minimal async SQL surface used by the repositories."""

    async def connect(self) -> None: ...

    async def disconnect(self) -> None: ...

    async def execute(self, query: str, *args: Any) -> None:
        """Run a statement, discarding any rows."""
        ...

    async def fetch_one(self, query: str, *args: Any) -> dict[str, Any] | None:
        """First row as a dict, or None."""
        ...

    async def fetch_all(self, query: str, *args: Any) -> list[dict[str, Any]]:
        """All rows as dicts."""
        ...


class DatabaseAdapter:
    """IDatabaseAdapter over an asyncpg connection pool."""

    def __init__(self, config: DatabaseConfig):
        self.config = config
        self._pool: asyncpg.Pool | None = None
        self._log = get_database_logger()

    @property
    def pool(self) -> asyncpg.Pool:
        if self._pool is None:
            raise RuntimeError("Database not connected")
        return self._pool

    @property
    def connected(self) -> bool:
        return self._pool is not None

    async def connect(self) -> None:
        """Create the pool; a second call is a no-op."""
        if self._pool is not None:
            return
        self._pool = await asyncpg.create_pool(
            dsn=self.config.url,
            min_size=self.config.min_pool_size,
            max_size=self.config.pool_size,
            command_timeout=self.config.statement_timeout,
        )
        self._log.info(
            "pool_created",
            min_size=self.config.min_pool_size,
            max_size=self.config.pool_size,
        )

    async def disconnect(self) -> None:
        if self._pool is None:
            return
        pool, self._pool = self._pool, None
        await pool.close()
        self._log.info("pool_closed")

    async def execute(self, query: str, *args: Any) -> None:
        async with self.pool.acquire() as conn:
            await conn.execute(query, *args)

    async def fetch_one(self, query: str, *args: Any) -> dict[str, Any] | None:
        async with self.pool.acquire() as conn:
            row = await conn.fetchrow(query, *args)
        return dict(row) if row is not None else None

    async def fetch_all(self, query: str, *args: Any) -> list[dict[str, Any]]:
        async with self.pool.acquire() as conn:
            rows = await conn.fetch(query, *args)
        return [dict(row) for row in rows]
