"""Application state container for FastAPI dependency injection."""

from __future__ import annotations

from typing import TYPE_CHECKING

import httpx
from starlette.datastructures import State

from vixgate.infrastructure.config import AppConfig
from vixgate.infrastructure.graceful_shutdown import GracefulShutdown

if TYPE_CHECKING:
    from vixgate.application.use_cases.stream_request import StreamRequestUseCase
    from vixgate.domain.ports import CachePort, MetadataLookupPort, ScraperPort


class AppState(State):
    """FastAPI application state with all DI resources.

    Lifecycle managed by composition.py::lifespan().
    """

    # Configuration
    config: AppConfig

    # Infrastructure
    cache: CachePort
    http_client: httpx.AsyncClient

    # Ports
    metadata: MetadataLookupPort
    scraper: ScraperPort

    # Use case
    stream_uc: StreamRequestUseCase

    # Readiness + in-flight request tracking
    graceful_shutdown: GracefulShutdown
