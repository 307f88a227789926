"""CachePort on top of diskcache (SQLite file, no server)."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from pathlib import Path
from typing import Any, Optional, TypeVar

import structlog
from diskcache import Cache as DiskCache

log = structlog.get_logger(__name__)

_T = TypeVar("_T")


class DiskcacheAdapter:
    """Async facade over the synchronous ``diskcache.Cache``.

    Every disk operation is pushed to a worker thread; ``max_concurrent``
    bounds how many run at once so SQLite does not thrash on its lock.
    Metadata titles are the only tenant today, stored under their
    ``kitsu:title:*`` / ``tmdb:find:*`` keys.
    """

    def __init__(
        self,
        directory: str | Path = "./.cache/vixgate",
        ttl_seconds: int = 86_400,
        max_concurrent: int = 10,
    ) -> None:
        self.directory = Path(directory)
        self.default_ttl = ttl_seconds
        self._store: DiskCache | None = None
        self._slots = asyncio.Semaphore(max_concurrent)

    async def __aenter__(self) -> DiskcacheAdapter:
        if self._store is None:
            self._store = await asyncio.to_thread(DiskCache, str(self.directory))
            log.info("diskcache_opened", path=str(self.directory))
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        store, self._store = self._store, None
        if store is not None:
            await asyncio.to_thread(store.close)
            log.info("diskcache_closed", path=str(self.directory))

    async def _call(self, fn: Callable[..., _T], *args: Any, **kwargs: Any) -> _T:
        async with self._slots:
            return await asyncio.to_thread(fn, *args, **kwargs)

    def _opened(self) -> DiskCache:
        if self._store is None:
            raise RuntimeError(
                "Cache not initialized; enter it with 'async with' first"
            )
        return self._store

    async def get(self, key: str) -> Optional[Any]:
        value = await self._call(self._opened().get, key, default=None)
        log.debug("cache_get", key=key, hit=value is not None)
        return value

    async def set(self, key: str, value: Any, *, ttl: int | None = None) -> None:
        """Store *value*; *ttl* defaults to the adapter-wide TTL."""
        expire = self.default_ttl if ttl is None else ttl
        await self._call(self._opened().set, key, value, expire=expire)
        log.debug("cache_set", key=key, ttl=expire)

    # A closed cache holds nothing: the operations below answer "absent".

    async def delete(self, key: str) -> bool:
        if self._store is None:
            return False
        return bool(await self._call(self._store.delete, key))

    async def exists(self, key: str) -> bool:
        if self._store is None:
            return False
        # membership test honours expiry
        return await self._call(self._store.__contains__, key)

    async def clear(self) -> None:
        if self._store is None:
            return
        removed = await self._call(self._store.clear)
        log.warning("cache_cleared", path=str(self.directory), removed=removed)
