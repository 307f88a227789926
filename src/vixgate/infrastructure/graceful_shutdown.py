"""Readiness flag and in-flight request tracking for orderly shutdown."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import structlog

log = structlog.get_logger(__name__)


class GracefulShutdown:
    """Count in-flight requests and let shutdown wait until they finish.

    The HTTP middleware wraps each request in :meth:`track`; the lifespan
    calls :meth:`mark_ready` after startup and :meth:`drain` before tearing
    down shared resources, so a slow scraper call is not cut off by a
    closing HTTP client or cache.
    """

    def __init__(self) -> None:
        self._in_flight = 0
        self._idle = asyncio.Event()
        self._idle.set()
        self._ready = False
        self._stopping = False

    @property
    def in_flight(self) -> int:
        return self._in_flight

    @property
    def is_stopping(self) -> bool:
        return self._stopping

    @property
    def is_ready(self) -> bool:
        """True between startup completion and the start of shutdown."""
        return self._ready and not self._stopping

    def mark_ready(self) -> None:
        self._ready = True

    @asynccontextmanager
    async def track(self) -> AsyncIterator[None]:
        """Count the enclosed block as one in-flight request."""
        self._in_flight += 1
        self._idle.clear()
        try:
            yield
        finally:
            self._in_flight = max(self._in_flight - 1, 0)
            if self._in_flight == 0:
                self._idle.set()

    async def drain(self, *, timeout: float = 10.0) -> bool:
        """Stop reporting ready and wait up to *timeout* for in-flight requests.

        Returns True when everything finished in time.
        """
        self._stopping = True
        if self._in_flight == 0:
            return True
        log.info("shutdown_draining", in_flight=self._in_flight)
        try:
            await asyncio.wait_for(self._idle.wait(), timeout=timeout)
        except TimeoutError:
            log.warning(
                "shutdown_drain_timeout",
                in_flight=self._in_flight,
                timeout=timeout,
            )
            return False
        log.info("shutdown_drained")
        return True
