"""Shared test fixtures for the vixgate test suite."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any
from unittest.mock import AsyncMock

import pytest

from vixgate.domain.entities import (
    CatalogId,
    ClassifiedVersion,
    Episode,
    RequestSettings,
    Version,
    VersionLanguage,
)

# ---------------------------------------------------------------------------
# Domain entity fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def version() -> Version:
    return Version(id=101, slug="one-piece", name="One Piece", episodes_count=1100)


@pytest.fixture()
def dub_version() -> Version:
    return Version(id=202, slug="one-piece-ita", name="One Piece (ITA)")


@pytest.fixture()
def classified_sub(version: Version) -> ClassifiedVersion:
    return ClassifiedVersion(version=version, language=VersionLanguage.SUB)


@pytest.fixture()
def episode() -> Episode:
    return Episode(id=5005, number="5")


@pytest.fixture()
def series_id() -> CatalogId:
    return CatalogId.parse("kitsu:12:5")


@pytest.fixture()
def default_settings() -> RequestSettings:
    return RequestSettings()


# ---------------------------------------------------------------------------
# Fake scraper
# ---------------------------------------------------------------------------


@dataclass
class FakeScraper:
    """In-memory ScraperPort.

    Values in the lookup tables may be exceptions, which are raised instead
    of returned. Every call is appended to ``calls``; ``peak_in_flight`` holds
    the most calls that were awaiting an answer at the same time.
    """

    searches: dict[tuple[str, bool], Any] = field(default_factory=dict)
    episodes: dict[int, Any] = field(default_factory=dict)
    streams: dict[tuple[int, int], Any] = field(default_factory=dict)
    # call tuple -> seconds to sleep before answering
    delays: dict[tuple[Any, ...], float] = field(default_factory=dict)
    calls: list[tuple[Any, ...]] = field(default_factory=list)
    in_flight: int = 0
    peak_in_flight: int = 0

    async def _record(self, call: tuple[Any, ...]) -> None:
        self.calls.append(call)
        self.in_flight += 1
        self.peak_in_flight = max(self.peak_in_flight, self.in_flight)
        try:
            delay = self.delays.get(call)
            if delay:
                await asyncio.sleep(delay)
        finally:
            self.in_flight -= 1

    @staticmethod
    def _answer(value: Any) -> Any:
        if isinstance(value, BaseException):
            raise value
        return value

    async def search(self, query: str, *, dubbed: bool = False) -> list[dict[str, Any]]:
        await self._record(("search", query, dubbed))
        return self._answer(self.searches.get((query, dubbed), []))

    async def get_episodes(self, anime_id: int) -> list[dict[str, Any]]:
        await self._record(("get_episodes", anime_id))
        return self._answer(self.episodes.get(anime_id, []))

    async def get_stream(
        self, anime_id: int, slug: str, episode_id: int
    ) -> dict[str, Any]:
        await self._record(("get_stream", anime_id, slug, episode_id))
        return self._answer(self.streams.get((anime_id, episode_id), {}))

    def verbs(self) -> list[str]:
        return [c[0] for c in self.calls]


@pytest.fixture()
def fake_scraper() -> FakeScraper:
    return FakeScraper()


# ---------------------------------------------------------------------------
# Mock port fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def mock_cache() -> AsyncMock:
    """Mock CachePort."""
    cache = AsyncMock()
    cache.get = AsyncMock(return_value=None)
    cache.set = AsyncMock()
    cache.delete = AsyncMock(return_value=True)
    cache.exists = AsyncMock(return_value=False)
    cache.clear = AsyncMock()
    cache.aclose = AsyncMock()
    return cache
