"""Port for the external upstream-site scraper."""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class ScraperPort(Protocol):
    """Async interface to the scraper's three verbs.

    Implementations return the decoded JSON records unchanged; turning them
    into domain entities is the caller's job. Every failure (process error,
    malformed output, timeout) is raised as a ``ScraperError`` subclass.
    """

    async def search(self, query: str, *, dubbed: bool = False) -> list[dict[str, Any]]:
        """Search the upstream site. ``dubbed`` selects the dubbed listings."""
        ...

    async def get_episodes(self, anime_id: int) -> list[dict[str, Any]]:
        """Return the full episode list of one upstream listing."""
        ...

    async def get_stream(
        self, anime_id: int, slug: str, episode_id: int
    ) -> dict[str, Any]:
        """Return ``mp4_url`` / ``embed_url`` for one episode."""
        ...
