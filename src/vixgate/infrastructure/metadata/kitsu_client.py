"""Kitsu API client: async httpx implementation with caching."""

from __future__ import annotations

from typing import Any

import httpx
import structlog

from vixgate.domain.entities.catalog import CatalogId
from vixgate.domain.ports.cache import CachePort

log = structlog.get_logger(__name__)

_BASE_URL = "https://kitsu.io/api/edge"
_TTL_TITLE = 86_400  # 24 hours


class HttpxKitsuClient:
    """Resolve Kitsu anime ids to a search title.

    Implements ``MetadataLookupPort`` for the ``kitsu`` namespace.
    Title preference: English, canonical, romanized Japanese.
    """

    def __init__(
        self,
        *,
        http_client: httpx.AsyncClient,
        cache: CachePort,
        base_url: str = _BASE_URL,
        ttl_seconds: int = _TTL_TITLE,
    ) -> None:
        self._http = http_client
        self._cache = cache
        self._base_url = base_url.rstrip("/")
        self._ttl = ttl_seconds

    async def _get(self, path: str) -> dict[str, Any] | None:
        """GET request with error handling. Returns parsed JSON or None."""
        url = f"{self._base_url}{path}"
        try:
            resp = await self._http.get(
                url, headers={"Accept": "application/vnd.api+json"}
            )
            if resp.status_code == 404:
                log.debug("kitsu_resource_not_found", path=path)
                return None
            resp.raise_for_status()
            return resp.json()
        except httpx.HTTPStatusError:
            log.warning("kitsu_http_error", path=path, exc_info=True)
            return None
        except httpx.HTTPError:
            log.warning("kitsu_network_error", path=path, exc_info=True)
            return None
        except ValueError:
            log.warning("kitsu_invalid_json", path=path)
            return None

    @staticmethod
    def _pick_title(attributes: dict[str, Any]) -> str | None:
        titles = attributes.get("titles") or {}
        for candidate in (
            titles.get("en"),
            attributes.get("canonicalTitle"),
            titles.get("en_jp"),
        ):
            if isinstance(candidate, str) and candidate.strip():
                return candidate.strip()
        return None

    async def get_anime_title(self, kitsu_id: str) -> str | None:
        """Return the preferred title of a Kitsu anime, or None if unknown."""
        cache_key = f"kitsu:title:{kitsu_id}"
        cached = await self._cache.get(cache_key)
        if cached is not None:
            return cached

        data = await self._get(f"/anime/{kitsu_id}")
        if data is None:
            return None

        attributes = (data.get("data") or {}).get("attributes") or {}
        title = self._pick_title(attributes)
        if title:
            await self._cache.set(cache_key, title, ttl=self._ttl)
        return title

    async def get_title(self, catalog_id: CatalogId) -> str | None:
        return await self.get_anime_title(catalog_id.media_id)
