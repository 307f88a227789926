"""Resolve an episode's playable URL and build the final stream descriptors."""

from __future__ import annotations

import re
from collections.abc import Callable
from typing import Protocol

import structlog

from vixgate.domain.entities.catalog import (
    CatalogId,
    ClassifiedVersion,
    Episode,
    RawStream,
    StreamDescriptor,
    VersionLanguage,
)
from vixgate.domain.entities.settings import RequestSettings
from vixgate.domain.ports.scraper import ScraperPort

log = structlog.get_logger(__name__)

# (raw_url, proxy_base, password) -> proxied url
ProxyFormatter = Callable[[str, str, str], str]


class _FinalizerConfig(Protocol):
    """Configuration values consumed by StreamFinalizer."""

    label: str
    dub_marker: str
    dub_label: str
    sub_label: str


def _capitalize(text: str) -> str:
    return text[:1].upper() + text[1:]


class StreamFinalizer:
    """Turn a matched episode into zero or more StreamDescriptors.

    Emits nothing when the scraper returns no ``mp4_url``.
    """

    def __init__(
        self,
        *,
        scraper: ScraperPort,
        config: _FinalizerConfig,
        proxy_formatter: ProxyFormatter,
    ) -> None:
        self._scraper = scraper
        self._label = config.label
        self._marker_re = re.compile(
            r"\s*" + re.escape(config.dub_marker.strip()), re.IGNORECASE
        )
        self._language_labels = {
            VersionLanguage.SUB: config.sub_label,
            VersionLanguage.DUB: config.dub_label,
        }
        self._format_proxy = proxy_formatter

    def build_title(
        self,
        catalog_id: CatalogId,
        classified: ClassifiedVersion,
    ) -> str:
        """Build ``<Name> <LANG> S01E05``, or ``<Name> <LANG> (Movie)`` for movies."""
        version = classified.version
        clean_name = self._marker_re.sub("", version.name).strip() or version.slug
        lang = self._language_labels[classified.language]
        if catalog_id.is_movie:
            suffix = "(Movie)"
        else:
            season = 1 if catalog_id.season is None else catalog_id.season
            suffix = f"S{season:02d}E{catalog_id.episode:02d}"
        parts = (_capitalize(clean_name), lang, suffix)
        return " ".join(part for part in parts if part)

    async def finalize(
        self,
        catalog_id: CatalogId,
        classified: ClassifiedVersion,
        episode: Episode,
        settings: RequestSettings,
    ) -> list[StreamDescriptor]:
        version = classified.version
        record = await self._scraper.get_stream(version.id, version.slug, episode.id)
        raw = RawStream.from_record(record)

        if not raw.mp4_url:
            log.debug(
                "finalizer_no_stream_url",
                version_id=version.id,
                episode_id=episode.id,
            )
            return []

        title = self.build_title(catalog_id, classified)
        streams: list[StreamDescriptor] = []

        if settings.proxy_configured:
            streams.append(
                StreamDescriptor(
                    name=f"{self._label} (Proxy)",
                    title=title,
                    url=self._format_proxy(
                        raw.mp4_url, settings.proxy_url, settings.proxy_password
                    ),
                )
            )
            if settings.both_links:
                streams.append(
                    StreamDescriptor(name=self._label, title=title, url=raw.mp4_url)
                )
        else:
            streams.append(
                StreamDescriptor(name=self._label, title=title, url=raw.mp4_url)
            )

        if settings.include_embed and raw.embed_url:
            streams.append(
                StreamDescriptor(
                    name=self._label,
                    title=f"{title} [E]",
                    url=raw.embed_url,
                )
            )

        log.debug(
            "finalizer_streams_built",
            version_id=version.id,
            episode_id=episode.id,
            count=len(streams),
            proxied=settings.proxy_configured,
        )
        return streams
