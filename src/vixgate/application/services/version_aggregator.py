"""Parallel variant search, merge, dedup, and language classification."""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from typing import Any, Protocol

import structlog

from vixgate.domain.entities.catalog import (
    ClassifiedVersion,
    Version,
    VersionLanguage,
)
from vixgate.domain.errors import ScraperError
from vixgate.domain.ports.scraper import ScraperPort

log = structlog.get_logger(__name__)


class _AggregatorConfig(Protocol):
    """Configuration values consumed by VersionAggregator."""

    dub_marker: str
    variants: Sequence[str]


def classify_language(
    name: str,
    searched_as: VersionLanguage,
    dub_marker: str,
) -> VersionLanguage:
    """Classify a listing by its display name.

    A name containing *dub_marker* (case-insensitive) is DUB no matter which
    search returned it; otherwise the searched variant stands.
    """
    if dub_marker.lower() in name.lower():
        return VersionLanguage.DUB
    return searched_as


class VersionAggregator:
    """Search every configured variant concurrently and merge the results.

    A failing variant contributes nothing; the others still count. Merge order
    follows the configured variant order, and the first occurrence of an id
    wins.
    """

    def __init__(
        self,
        *,
        scraper: ScraperPort,
        config: _AggregatorConfig,
        search_timeout: float | None = None,
    ) -> None:
        self._scraper = scraper
        self._dub_marker = config.dub_marker
        self._variants = [VersionLanguage(v) for v in config.variants]
        self._search_timeout = search_timeout

    async def aggregate(self, query: str) -> list[ClassifiedVersion]:
        """Return deduplicated, classified versions for *query* (may be empty)."""
        per_variant = await asyncio.gather(
            *(self._search_variant(query, variant) for variant in self._variants)
        )

        seen: set[int] = set()
        merged: list[ClassifiedVersion] = []
        duplicates = 0
        for variant, records in zip(self._variants, per_variant):
            for record in records:
                try:
                    version = Version.from_record(record)
                except ScraperError:
                    log.warning(
                        "aggregator_record_invalid",
                        variant=variant.value,
                        record=str(record)[:200],
                    )
                    continue
                if version.id in seen:
                    duplicates += 1
                    continue
                seen.add(version.id)
                merged.append(
                    ClassifiedVersion(
                        version=version,
                        language=classify_language(
                            version.name, variant, self._dub_marker
                        ),
                    )
                )

        log.info(
            "aggregator_complete",
            query=query,
            versions=len(merged),
            duplicates=duplicates,
        )
        return merged

    async def _search_variant(
        self,
        query: str,
        variant: VersionLanguage,
    ) -> list[dict[str, Any]]:
        dubbed = variant is VersionLanguage.DUB
        try:
            search = self._scraper.search(query, dubbed=dubbed)
            if self._search_timeout is not None:
                return await asyncio.wait_for(search, timeout=self._search_timeout)
            return await search
        except TimeoutError:
            log.warning(
                "aggregator_variant_timeout",
                variant=variant.value,
                timeout=self._search_timeout,
            )
            return []
        except ScraperError as e:
            log.warning(
                "aggregator_variant_failed",
                variant=variant.value,
                query=query,
                error=str(e),
            )
            return []
        except Exception:
            log.warning(
                "aggregator_variant_error",
                variant=variant.value,
                query=query,
                exc_info=True,
            )
            return []
