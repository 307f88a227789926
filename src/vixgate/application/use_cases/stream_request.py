"""Stream request use case.

Catalog id -> metadata title -> normalized query -> variant search
-> per-version episode lookup + stream resolution -> StreamDescriptor list.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Sequence
from typing import Protocol

import structlog

from vixgate.application.services.episode_resolver import requested_episode_number
from vixgate.application.services.title_normalizer import normalize_title
from vixgate.domain.entities.catalog import (
    CatalogId,
    ClassifiedVersion,
    Episode,
    StreamDescriptor,
    Version,
    VersionOutcome,
)
from vixgate.domain.entities.settings import RequestSettings
from vixgate.domain.errors import CatalogIdParseError, ScraperError
from vixgate.domain.ports.metadata import MetadataLookupPort

log = structlog.get_logger(__name__)

# ---------------------------------------------------------------------------
# Protocols for the collaborators this use case drives.
# ---------------------------------------------------------------------------


class _StreamRequestConfig(Protocol):
    """Configuration values consumed by StreamRequestUseCase."""

    namespaces: Sequence[str]
    max_concurrent_versions: int
    version_timeout_seconds: float


class _Aggregator(Protocol):
    async def aggregate(self, query: str) -> list[ClassifiedVersion]: ...


class _Resolver(Protocol):
    async def resolve(
        self, version: Version, requested: str | int
    ) -> Episode | None: ...


class _Finalizer(Protocol):
    async def finalize(
        self,
        catalog_id: CatalogId,
        classified: ClassifiedVersion,
        episode: Episode,
        settings: RequestSettings,
    ) -> list[StreamDescriptor]: ...


_NO_EPISODE = "episode_not_found"


class StreamRequestUseCase:
    """Resolve a catalog id into playable stream descriptors.

    Flow:
        1. Parse the catalog id.
        2. Check the provider is enabled and serves the id's namespace.
        3. Look up the display title through the metadata port.
        4. Normalize the title and aggregate upstream versions.
        5. For every version (bounded concurrency, per-version timeout):
           find the episode, resolve its stream, build descriptors.
        6. Concatenate descriptors in version order.

    Never raises for upstream or input problems; an empty list is the
    answer for anything that cannot be resolved.
    """

    def __init__(
        self,
        *,
        metadata: MetadataLookupPort,
        aggregator: _Aggregator,
        resolver: _Resolver,
        finalizer: _Finalizer,
        config: _StreamRequestConfig,
    ) -> None:
        self._metadata = metadata
        self._aggregator = aggregator
        self._resolver = resolver
        self._finalizer = finalizer
        self._namespaces = frozenset(config.namespaces)
        self._max_concurrent = config.max_concurrent_versions
        self._version_timeout = config.version_timeout_seconds

    async def execute(
        self,
        raw_id: str,
        settings: RequestSettings,
    ) -> list[StreamDescriptor]:
        """Resolve streams for *raw_id* under the given request settings.

        Returns:
            Descriptors in the order their versions were aggregated.
            Empty list when the id is invalid, the provider is disabled,
            the title is unknown, or nothing upstream matches.
        """
        try:
            catalog_id = CatalogId.parse(raw_id)
        except CatalogIdParseError as e:
            log.info("stream_request_invalid_id", raw_id=raw_id, error=str(e))
            return []

        if not settings.enabled:
            log.debug("stream_request_provider_disabled", catalog_id=str(catalog_id))
            return []
        if catalog_id.namespace not in self._namespaces:
            log.debug(
                "stream_request_namespace_not_served",
                catalog_id=str(catalog_id),
                namespace=catalog_id.namespace,
            )
            return []

        t0 = time.perf_counter()
        try:
            title = await self._metadata.get_title(catalog_id)
        except Exception:
            log.warning(
                "stream_request_lookup_error",
                catalog_id=str(catalog_id),
                exc_info=True,
            )
            return []
        if not title:
            log.info("stream_request_title_not_found", catalog_id=str(catalog_id))
            return []

        query = normalize_title(title)
        try:
            versions = await self._aggregator.aggregate(query)
        except Exception:
            log.warning(
                "stream_request_aggregate_error",
                catalog_id=str(catalog_id),
                query=query,
                exc_info=True,
            )
            return []
        if not versions:
            log.info(
                "stream_request_no_versions",
                catalog_id=str(catalog_id),
                query=query,
            )
            return []

        outcomes = await self._process_versions(catalog_id, versions, settings)

        streams: list[StreamDescriptor] = []
        for outcome in outcomes:
            streams.extend(outcome.streams)

        log.info(
            "stream_request_complete",
            catalog_id=str(catalog_id),
            title=title,
            query=query,
            versions=len(versions),
            skipped=sum(1 for o in outcomes if not o.ok),
            stream_count=len(streams),
            duration_ms=round((time.perf_counter() - t0) * 1000.0, 2),
        )
        return streams

    async def _process_versions(
        self,
        catalog_id: CatalogId,
        versions: list[ClassifiedVersion],
        settings: RequestSettings,
    ) -> list[VersionOutcome]:
        """Run every version's pipeline with bounded concurrency, keeping order."""
        semaphore = asyncio.Semaphore(self._max_concurrent)
        requested = requested_episode_number(catalog_id)

        async def _run_one(classified: ClassifiedVersion) -> VersionOutcome:
            async with semaphore:
                try:
                    return await asyncio.wait_for(
                        self._process_version(
                            catalog_id, classified, requested, settings
                        ),
                        timeout=self._version_timeout,
                    )
                except TimeoutError:
                    return self._skipped(
                        classified, f"timeout after {self._version_timeout}s"
                    )
                except ScraperError as e:
                    return self._skipped(classified, f"{type(e).__name__}: {e}")
                except Exception as e:
                    log.warning(
                        "version_error",
                        version_id=classified.version.id,
                        exc_info=True,
                    )
                    return self._skipped(classified, f"{type(e).__name__}: {e}")

        return list(await asyncio.gather(*(_run_one(v) for v in versions)))

    async def _process_version(
        self,
        catalog_id: CatalogId,
        classified: ClassifiedVersion,
        requested: str,
        settings: RequestSettings,
    ) -> VersionOutcome:
        episode = await self._resolver.resolve(classified.version, requested)
        if episode is None:
            log.debug(
                "version_no_matching_episode",
                version_id=classified.version.id,
                requested=requested,
            )
            return VersionOutcome(
                version=classified.version,
                language=classified.language,
                skipped_reason=_NO_EPISODE,
            )

        streams = await self._finalizer.finalize(
            catalog_id, classified, episode, settings
        )
        return VersionOutcome(
            version=classified.version,
            language=classified.language,
            streams=tuple(streams),
        )

    @staticmethod
    def _skipped(classified: ClassifiedVersion, reason: str) -> VersionOutcome:
        log.warning(
            "version_skipped",
            version_id=classified.version.id,
            slug=classified.version.slug,
            language=classified.language.value,
            reason=reason,
        )
        return VersionOutcome(
            version=classified.version,
            language=classified.language,
            skipped_reason=reason,
        )
