"""TMDB API client: async httpx implementation with caching."""

from __future__ import annotations

from typing import Any

import httpx
import structlog

from vixgate.domain.entities.catalog import CatalogId
from vixgate.domain.ports.cache import CachePort

log = structlog.get_logger(__name__)

_BASE_URL = "https://api.themoviedb.org/3"
_TTL_FIND = 86_400  # 24 hours


class HttpxTmdbClient:
    """Resolve IMDb ids to a title via TMDB ``/find``.

    Implements ``MetadataLookupPort`` for the ``imdb`` namespace.
    """

    def __init__(
        self,
        *,
        api_key: str,
        http_client: httpx.AsyncClient,
        cache: CachePort,
        language: str = "en-US",
    ) -> None:
        self._api_key = api_key
        self._http = http_client
        self._cache = cache
        self._language = language

    def _params(self, **extra: Any) -> dict[str, Any]:
        return {"api_key": self._api_key, "language": self._language, **extra}

    async def _get(self, path: str, **extra: Any) -> dict[str, Any] | None:
        """GET request with error handling. Returns parsed JSON or None."""
        url = f"{_BASE_URL}{path}"
        try:
            resp = await self._http.get(url, params=self._params(**extra))
            if resp.status_code == 401:
                log.error("tmdb_api_key_invalid", status=401)
                return None
            if resp.status_code == 404:
                log.debug("tmdb_resource_not_found", path=path)
                return None
            resp.raise_for_status()
            return resp.json()
        except httpx.HTTPStatusError:
            log.warning("tmdb_http_error", path=path, exc_info=True)
            return None
        except httpx.HTTPError:
            log.warning("tmdb_network_error", path=path, exc_info=True)
            return None
        except ValueError:
            log.warning("tmdb_invalid_json", path=path)
            return None

    async def find_by_imdb_id(self, imdb_id: str) -> dict[str, Any] | None:
        """Lookup TMDB entry by IMDb ID. Returns movie/TV metadata or None."""
        cache_key = f"tmdb:find:{imdb_id}:{self._language}"
        cached = await self._cache.get(cache_key)
        if cached is not None:
            return cached

        data = await self._get(f"/find/{imdb_id}", external_source="imdb_id")
        if data is None:
            return None

        # /find returns lists grouped by media type
        for media_type in ("movie_results", "tv_results"):
            results = data.get(media_type, [])
            if results:
                result = results[0]
                await self._cache.set(cache_key, result, ttl=_TTL_FIND)
                return result

        return None

    async def get_title(self, catalog_id: CatalogId) -> str | None:
        result = await self.find_by_imdb_id(catalog_id.media_id)
        if result is None:
            return None
        # Movies use "title", TV shows use "name"
        return result.get("title") or result.get("name") or None
