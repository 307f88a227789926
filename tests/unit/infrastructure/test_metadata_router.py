"""Tests for MetadataRouter namespace dispatch."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from vixgate.domain.entities import CatalogId
from vixgate.infrastructure.metadata import MetadataRouter


def _lookup(title: str | None) -> AsyncMock:
    lookup = AsyncMock()
    lookup.get_title = AsyncMock(return_value=title)
    return lookup


class TestMetadataRouter:
    @pytest.mark.asyncio()
    async def test_dispatches_by_namespace(self) -> None:
        kitsu = _lookup("One Piece")
        imdb = _lookup("Spirited Away")
        router = MetadataRouter({"kitsu": kitsu, "imdb": imdb})

        cid = CatalogId.parse("kitsu:12:1:5")
        assert await router.get_title(cid) == "One Piece"
        kitsu.get_title.assert_awaited_once_with(cid)
        imdb.get_title.assert_not_awaited()

    @pytest.mark.asyncio()
    async def test_imdb_namespace(self) -> None:
        imdb = _lookup("Spirited Away")
        router = MetadataRouter({"imdb": imdb})

        assert await router.get_title(CatalogId.parse("tt0245429")) == "Spirited Away"

    @pytest.mark.asyncio()
    async def test_unsupported_namespace_returns_none(self) -> None:
        router = MetadataRouter({"kitsu": _lookup("One Piece")})

        assert await router.get_title(CatalogId.parse("tt0245429")) is None

    def test_namespaces_sorted(self) -> None:
        router = MetadataRouter({"kitsu": _lookup(None), "imdb": _lookup(None)})

        assert router.namespaces == ["imdb", "kitsu"]
