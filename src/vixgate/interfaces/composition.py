"""Composition root: dependency injection via FastAPI lifespan."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, cast

import httpx
import structlog
from fastapi import FastAPI

from vixgate.application.services import (
    EpisodeResolver,
    StreamFinalizer,
    VersionAggregator,
)
from vixgate.application.use_cases import StreamRequestUseCase
from vixgate.domain.ports import MetadataLookupPort
from vixgate.infrastructure.cache import DiskcacheAdapter
from vixgate.infrastructure.config.schema import AppConfig
from vixgate.infrastructure.metadata import (
    HttpxKitsuClient,
    HttpxTmdbClient,
    MetadataRouter,
)
from vixgate.infrastructure.proxy import format_proxy_url
from vixgate.infrastructure.scraper import SubprocessScraper
from vixgate.interfaces.app_state import AppState

log = structlog.get_logger(__name__)

# Seconds to wait for in-flight stream requests before closing resources.
_DRAIN_TIMEOUT = 10.0


def _build_metadata(state: AppState, config: AppConfig) -> MetadataRouter:
    """Wire one title lookup per catalog namespace the provider serves."""
    lookups: dict[str, MetadataLookupPort] = {}

    if "kitsu" in config.provider.namespaces:
        lookups["kitsu"] = HttpxKitsuClient(
            http_client=state.http_client,
            cache=state.cache,
            ttl_seconds=config.cache_ttl_seconds,
        )

    if "imdb" in config.provider.namespaces:
        if config.tmdb_api_key:
            lookups["imdb"] = HttpxTmdbClient(
                api_key=config.tmdb_api_key,
                http_client=state.http_client,
                cache=state.cache,
            )
        else:
            log.warning(
                "tmdb_client_disabled",
                reason="imdb namespace configured without tmdb_api_key",
            )

    router = MetadataRouter(lookups)
    log.info("metadata_initialized", namespaces=router.namespaces)
    return router


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Create shared resources on startup, release them in reverse on shutdown."""
    state = cast(AppState, app.state)
    config = state.config

    log.info(
        "app_startup",
        environment=config.environment,
        provider_enabled=config.provider.enabled,
        scraper_command=config.scraper.command,
    )

    # 1) Cache (metadata lookups depend on it)
    cache = DiskcacheAdapter(
        directory=config.cache_dir,
        ttl_seconds=config.cache_ttl_seconds,
        max_concurrent=config.cache_max_concurrent,
    )
    await cache.__aenter__()
    state.cache = cache

    # 2) Shared HTTP client for metadata APIs
    state.http_client = httpx.AsyncClient(
        timeout=httpx.Timeout(config.http_timeout_seconds),
        headers={"User-Agent": config.http_user_agent},
        follow_redirects=config.http_follow_redirects,
    )
    log.info("http_client_initialized", timeout=config.http_timeout_seconds)

    try:
        # 3) Metadata lookups
        state.metadata = _build_metadata(state, config)

        # 4) Scraper
        state.scraper = SubprocessScraper(
            command=config.scraper.command,
            timeout=config.scraper.timeout_seconds,
            cwd=config.scraper.cwd,
        )
        log.info(
            "scraper_initialized",
            command=config.scraper.command,
            timeout=config.scraper.timeout_seconds,
        )

        # 5) Services + use case
        state.stream_uc = StreamRequestUseCase(
            metadata=state.metadata,
            aggregator=VersionAggregator(
                scraper=state.scraper,
                config=config.provider,
                search_timeout=config.scraper.timeout_seconds,
            ),
            resolver=EpisodeResolver(scraper=state.scraper),
            finalizer=StreamFinalizer(
                scraper=state.scraper,
                config=config.provider,
                proxy_formatter=format_proxy_url,
            ),
            config=config.provider,
        )

        state.graceful_shutdown.mark_ready()
        log.info("app_startup_complete")

        yield
    finally:
        await state.graceful_shutdown.drain(timeout=_DRAIN_TIMEOUT)

        await state.http_client.aclose()
        log.info("http_client_closed")

        await state.cache.aclose()
        log.info("cache_closed")

        log.info("app_shutdown_complete")
