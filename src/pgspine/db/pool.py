"""
asyncpg pools per logical database, and scoped handles on top of them.

One pool per resource name, created lazily from the name's
:class:`ResourceProfile` the first time an attempt opens a handle on it.
Handles are handed out through an async context manager that returns the
connection to its pool on every exit path::

    pools = PoolManager()
    async with pools.acquire(profile) as handle:
        await handle.open()
        rows = await handle.connection.fetch("SELECT * FROM users LIMIT 10")
    await pools.aclose()

Profile → asyncpg mapping:

==========================  ===================================
ResourceProfile             asyncpg.create_pool
==========================  ===================================
pool_min / pool_max         min_size / max_size
idle_lifetime               max_inactive_connection_lifetime
connect_timeout             timeout (also the acquire timeout)
operation_timeout           command_timeout
statement_cache_max         statement_cache_size
keepalive(_interval)        server_settings tcp_keepalives_*
==========================  ===================================

``pruning_interval``, ``statement_cache_min_uses`` and ``load_balance_hosts``
have no asyncpg counterpart; they are reported but not applied.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from typing import Any

import asyncpg

from pgspine.core.errors import InternalError
from pgspine.core.logging import get_logger, safe_log
from pgspine.resilience.profiles import ResourceProfile

logger = get_logger(__name__)

APPLICATION_NAME = "pgspine"

PoolFactory = Callable[..., Awaitable[Any]]


def pool_options(profile: ResourceProfile) -> dict[str, Any]:
    """Keyword arguments for ``asyncpg.create_pool`` built from ``profile``."""
    options = profile.target.connect_kwargs()
    options.update(
        min_size=profile.pool_min,
        max_size=profile.pool_max,
        max_inactive_connection_lifetime=profile.idle_lifetime,
        timeout=profile.connect_timeout,
        command_timeout=profile.operation_timeout,
        statement_cache_size=profile.statement_cache_max,
        server_settings={
            "application_name": APPLICATION_NAME,
            "tcp_keepalives_idle": str(int(profile.keepalive)),
            "tcp_keepalives_interval": str(int(profile.keepalive_interval)),
        },
    )
    return options


class AsyncpgHandle:
    """One pooled connection for the duration of one attempt."""

    def __init__(self, manager: PoolManager, profile: ResourceProfile) -> None:
        self._manager = manager
        self.profile = profile
        self._pool: Any = None
        self._conn: Any = None

    @property
    def is_open(self) -> bool:
        return self._conn is not None and not self._conn.is_closed()

    @property
    def connection(self) -> Any:
        if self._conn is None:
            raise InternalError(f"Handle for '{self.profile.name}' is not open")
        return self._conn

    async def open(self) -> None:
        if self.is_open:
            return
        self._pool = await self._manager.get_pool(self.profile)
        self._conn = await self._pool.acquire(timeout=self.profile.connect_timeout)

    async def probe(self, timeout: float) -> None:
        await self.connection.fetchval("SELECT 1", timeout=timeout)

    async def release(self) -> None:
        conn, self._conn = self._conn, None
        if conn is None:
            return
        try:
            await self._pool.release(conn)
        except Exception as e:  # noqa: BLE001
            safe_log(
                logger,
                "warning",
                "connection_release_failed",
                resource=self.profile.name,
                error_type=type(e).__name__,
                error=str(e),
            )


class PoolManager:
    """Lazily created asyncpg pool per resource name."""

    def __init__(self, pool_factory: PoolFactory | None = None) -> None:
        self._factory = pool_factory or asyncpg.create_pool
        self._pools: dict[str, Any] = {}
        self._locks: dict[str, asyncio.Lock] = {}

    async def get_pool(self, profile: ResourceProfile) -> Any:
        key = profile.name.casefold()
        pool = self._pools.get(key)
        if pool is not None:
            return pool

        lock = self._locks.setdefault(key, asyncio.Lock())
        async with lock:
            pool = self._pools.get(key)
            if pool is None:
                pool = await self._factory(**pool_options(profile))
                if pool is None:
                    raise InternalError(f"Failed to create connection pool for '{profile.name}'")
                self._pools[key] = pool
                safe_log(
                    logger,
                    "info",
                    "pool_created",
                    resource=profile.name,
                    min_size=profile.pool_min,
                    max_size=profile.pool_max,
                )
        return pool

    @asynccontextmanager
    async def acquire(self, profile: ResourceProfile) -> AsyncIterator[AsyncpgHandle]:
        handle = AsyncpgHandle(self, profile)
        try:
            yield handle
        finally:
            await handle.release()

    def stats(self, name: str) -> dict[str, Any] | None:
        """Size statistics for the pool of ``name``, or None if not created."""
        pool = self._pools.get(name.casefold())
        if pool is None:
            return None
        return {
            "size": pool.get_size(),
            "free_size": pool.get_idle_size(),
            "min_size": pool.get_min_size(),
            "max_size": pool.get_max_size(),
        }

    def names(self) -> list[str]:
        return sorted(self._pools)

    async def aclose(self) -> None:
        """Close every pool; waits for checked-out connections to return."""
        pools, self._pools = self._pools, {}
        self._locks.clear()
        for key, pool in pools.items():
            try:
                await pool.close()
                safe_log(logger, "info", "pool_closed", resource=key)
            except Exception as e:  # noqa: BLE001
                safe_log(logger, "warning", "pool_close_failed", resource=key, error=str(e))


__all__ = ["APPLICATION_NAME", "AsyncpgHandle", "PoolManager", "pool_options"]
