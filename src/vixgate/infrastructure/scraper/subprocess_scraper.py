"""Scraper adapter that runs the upstream-site scraper as a child process.

Each call spawns ``<command...> <verb> <flags...>``, waits for it to exit,
and decodes stdout as one JSON value::

    search       --query=Q [--dubbed]       -> list of listings
    get_episodes --anime-id N               -> list of episodes
    get_stream   --anime-id N --anime-slug S --episode-id E -> object
"""

from __future__ import annotations

import asyncio
import json
import time
from pathlib import Path
from typing import Any

import structlog

from vixgate.domain.errors import (
    ScraperOutputError,
    ScraperProcessError,
    ScraperTimeoutError,
)

log = structlog.get_logger(__name__)

# Keep log lines bounded when the scraper dumps a traceback.
_MAX_LOGGED_OUTPUT = 500


class SubprocessScraper:
    """Async ``ScraperPort`` implementation over ``asyncio.create_subprocess_exec``.

    Args:
        command: Argv prefix, e.g. ``["python3", "animeunity_scraper.py"]``.
        timeout: Per-call timeout in seconds. The child is killed when exceeded.
        cwd: Optional working directory for the child process.
    """

    def __init__(
        self,
        *,
        command: list[str],
        timeout: float = 30.0,
        cwd: Path | None = None,
    ) -> None:
        if not command:
            raise ValueError("command must not be empty")
        self._command = list(command)
        self._timeout = timeout
        self._cwd = cwd

    # ------------------------------------------------------------------
    # ScraperPort
    # ------------------------------------------------------------------

    async def search(self, query: str, *, dubbed: bool = False) -> list[dict[str, Any]]:
        args = ["search", f"--query={query}"]
        if dubbed:
            args.append("--dubbed")
        return self._expect_list(await self._invoke(args), verb="search")

    async def get_episodes(self, anime_id: int) -> list[dict[str, Any]]:
        data = await self._invoke(["get_episodes", "--anime-id", str(anime_id)])
        return self._expect_list(data, verb="get_episodes")

    async def get_stream(
        self, anime_id: int, slug: str, episode_id: int
    ) -> dict[str, Any]:
        data = await self._invoke(
            [
                "get_stream",
                "--anime-id",
                str(anime_id),
                "--anime-slug",
                slug,
                "--episode-id",
                str(episode_id),
            ]
        )
        if not isinstance(data, dict):
            raise ScraperOutputError(
                f"get_stream returned {type(data).__name__}, expected object"
            )
        return data

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _expect_list(data: Any, *, verb: str) -> list[dict[str, Any]]:
        # Some scraper builds print `null` when nothing matched.
        if data is None:
            return []
        if not isinstance(data, list):
            raise ScraperOutputError(
                f"{verb} returned {type(data).__name__}, expected list"
            )
        return data

    async def _invoke(self, args: list[str]) -> Any:
        """Run the scraper with *args* and return the decoded JSON stdout."""
        argv = [*self._command, *args]
        verb = args[0]
        t0 = time.perf_counter()

        try:
            process = await asyncio.create_subprocess_exec(
                *argv,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                cwd=str(self._cwd) if self._cwd else None,
            )
        except OSError as e:
            log.error("scraper_spawn_failed", command=self._command[0], error=str(e))
            raise ScraperProcessError(f"Failed to start scraper: {e}") from e

        try:
            stdout, stderr = await asyncio.wait_for(
                process.communicate(), timeout=self._timeout
            )
        except TimeoutError:
            await self._kill(process)
            log.warning("scraper_timeout", verb=verb, timeout=self._timeout)
            raise ScraperTimeoutError(
                f"Scraper {verb} exceeded {self._timeout}s"
            ) from None
        except asyncio.CancelledError:
            await self._kill(process)
            raise

        duration_ms = round((time.perf_counter() - t0) * 1000.0, 2)
        err_text = stderr.decode("utf-8", errors="replace")

        if process.returncode != 0:
            log.warning(
                "scraper_exit_nonzero",
                verb=verb,
                returncode=process.returncode,
                stderr=err_text[-_MAX_LOGGED_OUTPUT:],
                duration_ms=duration_ms,
            )
            raise ScraperProcessError(
                f"Scraper {verb} exited with code {process.returncode}",
                returncode=process.returncode,
                stderr=err_text,
            )

        out_text = stdout.decode("utf-8", errors="replace")
        try:
            data = json.loads(out_text)
        except ValueError as e:
            log.warning(
                "scraper_output_invalid",
                verb=verb,
                stdout=out_text[:_MAX_LOGGED_OUTPUT],
            )
            raise ScraperOutputError(f"Scraper {verb} printed invalid JSON") from e

        log.debug("scraper_call_done", verb=verb, duration_ms=duration_ms)
        return data

    @staticmethod
    async def _kill(process: asyncio.subprocess.Process) -> None:
        if process.returncode is None:
            try:
                process.kill()
            except ProcessLookupError:
                return
            await process.wait()
