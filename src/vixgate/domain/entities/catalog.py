"""Domain entities for catalog ids, upstream versions, and stream output.

Pure value objects without framework dependencies or I/O.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Literal

from vixgate.domain.errors import CatalogIdParseError, ScraperOutputError

CatalogNamespace = Literal["kitsu", "imdb"]

_IMDB_RE = re.compile(r"^tt\d+$")


def _parse_number(raw: str, what: str, source: str) -> int:
    if not (raw.isascii() and raw.isdigit()):
        raise CatalogIdParseError(f"Invalid {what} {raw!r} in catalog id {source!r}")
    return int(raw)


class VersionLanguage(str, Enum):
    """Language variant of an upstream listing."""

    SUB = "SUB"
    DUB = "DUB"


@dataclass(frozen=True)
class CatalogId:
    """Parsed Stremio catalog id.

    Accepted shapes::

        kitsu:12          movie (no episode)
        kitsu:12:5        episode 5
        kitsu:12:2:5      season 2, episode 5
        tt0123456         movie
        tt0123456:1:5     season 1, episode 5
    """

    namespace: CatalogNamespace
    media_id: str
    season: int | None = None
    episode: int | None = None

    @property
    def is_movie(self) -> bool:
        return self.episode is None

    @classmethod
    def parse(cls, raw: str) -> CatalogId:
        """Parse *raw* into a CatalogId, raising CatalogIdParseError if malformed."""
        text = (raw or "").strip()
        parts = text.split(":")

        if parts[0] == "kitsu":
            rest = parts[1:]
            if not rest or len(rest) > 3:
                raise CatalogIdParseError(f"Malformed kitsu id: {raw!r}")
            media_id = str(_parse_number(rest[0], "kitsu id", raw))
            if len(rest) == 1:
                return cls(namespace="kitsu", media_id=media_id)
            if len(rest) == 2:
                return cls(
                    namespace="kitsu",
                    media_id=media_id,
                    episode=_parse_number(rest[1], "episode", raw),
                )
            return cls(
                namespace="kitsu",
                media_id=media_id,
                season=_parse_number(rest[1], "season", raw),
                episode=_parse_number(rest[2], "episode", raw),
            )

        if _IMDB_RE.match(parts[0]):
            if len(parts) == 1:
                return cls(namespace="imdb", media_id=parts[0])
            if len(parts) == 3:
                return cls(
                    namespace="imdb",
                    media_id=parts[0],
                    season=_parse_number(parts[1], "season", raw),
                    episode=_parse_number(parts[2], "episode", raw),
                )
            raise CatalogIdParseError(f"Malformed IMDb id: {raw!r}")

        raise CatalogIdParseError(f"Unsupported catalog id: {raw!r}")

    def __str__(self) -> str:
        prefix = self.media_id
        if self.namespace == "kitsu":
            prefix = f"kitsu:{self.media_id}"
        if self.season is not None:
            return f"{prefix}:{self.season}:{self.episode}"
        if self.episode is not None:
            return f"{prefix}:{self.episode}"
        return prefix


@dataclass(frozen=True)
class Version:
    """One upstream search result (a distinct listing of a title)."""

    id: int
    slug: str
    name: str
    episodes_count: int = 0

    @classmethod
    def from_record(cls, record: Any) -> Version:
        """Build a Version from a scraper search record."""
        if not isinstance(record, dict):
            raise ScraperOutputError(f"Search record is not an object: {record!r}")
        try:
            return cls(
                id=int(record["id"]),
                slug=str(record.get("slug") or ""),
                name=str(record.get("name") or ""),
                episodes_count=int(record.get("episodes_count") or 0),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise ScraperOutputError(f"Invalid search record: {record!r}") from e


@dataclass(frozen=True)
class ClassifiedVersion:
    """A Version together with its detected language variant."""

    version: Version
    language: VersionLanguage


@dataclass(frozen=True)
class Episode:
    """One episode of a Version. ``number`` is always kept as a string."""

    id: int
    number: str
    name: str | None = None

    @classmethod
    def from_record(cls, record: Any) -> Episode:
        if not isinstance(record, dict):
            raise ScraperOutputError(f"Episode record is not an object: {record!r}")
        try:
            number = record["number"]
            return cls(
                id=int(record["id"]),
                number=str(number).strip() if number is not None else "",
                name=record.get("name"),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise ScraperOutputError(f"Invalid episode record: {record!r}") from e


@dataclass(frozen=True)
class RawStream:
    """URLs returned by the scraper for one episode."""

    mp4_url: str | None = None
    embed_url: str | None = None
    episode_page: str | None = None

    @classmethod
    def from_record(cls, record: Any) -> RawStream:
        if not isinstance(record, dict):
            raise ScraperOutputError(f"Stream record is not an object: {record!r}")
        return cls(
            mp4_url=record.get("mp4_url") or None,
            embed_url=record.get("embed_url") or None,
            episode_page=record.get("episode_page") or None,
        )


@dataclass(frozen=True)
class StreamDescriptor:
    """Stremio protocol Stream object (JSON-serializable)."""

    name: str  # Addon label, e.g. "AnimeUnity (Proxy)"
    title: str  # e.g. "One piece SUB S01E05"
    url: str
    not_web_ready: bool = True

    def to_stremio(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "title": self.title,
            "url": self.url,
            "behaviorHints": {"notWebReady": self.not_web_ready},
        }


@dataclass(frozen=True)
class VersionOutcome:
    """Result of processing one version: streams, or the reason it was skipped."""

    version: Version
    language: VersionLanguage
    streams: tuple[StreamDescriptor, ...] = ()
    skipped_reason: str | None = None

    @property
    def ok(self) -> bool:
        return self.skipped_reason is None
