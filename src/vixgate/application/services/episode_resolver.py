"""Locate the requested episode inside one upstream listing."""

from __future__ import annotations

import structlog

from vixgate.domain.entities.catalog import CatalogId, Episode, Version
from vixgate.domain.errors import ScraperError
from vixgate.domain.ports.scraper import ScraperPort

log = structlog.get_logger(__name__)

# Movies are listed upstream as a single episode numbered "1".
MOVIE_EPISODE_NUMBER = "1"


def requested_episode_number(catalog_id: CatalogId) -> str:
    """Episode number to look for: ``"1"`` for movies, else the episode."""
    if catalog_id.is_movie:
        return MOVIE_EPISODE_NUMBER
    return str(catalog_id.episode)


class EpisodeResolver:
    """Fetch a version's episode list and pick the requested episode.

    Matching is exact on the string form of the number (``"01"`` does not
    match ``"1"``); the first match wins. Scraper failures propagate.
    """

    def __init__(self, *, scraper: ScraperPort) -> None:
        self._scraper = scraper

    async def resolve(self, version: Version, requested: str | int) -> Episode | None:
        """Return the matching Episode, or None when the version lacks it."""
        wanted = str(requested).strip()
        records = await self._scraper.get_episodes(version.id)

        for record in records:
            try:
                episode = Episode.from_record(record)
            except ScraperError:
                log.debug(
                    "episode_record_invalid",
                    version_id=version.id,
                    record=str(record)[:200],
                )
                continue
            if episode.number == wanted:
                return episode

        log.debug(
            "episode_not_found",
            version_id=version.id,
            requested=wanted,
            available=len(records),
        )
        return None
