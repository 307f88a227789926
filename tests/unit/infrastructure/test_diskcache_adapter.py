"""Tests for DiskcacheAdapter (async wrapper around diskcache)."""

from __future__ import annotations

from collections.abc import AsyncIterator
from pathlib import Path

import pytest

from vixgate.infrastructure.cache.diskcache_adapter import DiskcacheAdapter


@pytest.fixture()
async def cache(tmp_path: Path) -> AsyncIterator[DiskcacheAdapter]:
    adapter = DiskcacheAdapter(directory=tmp_path / "cache", ttl_seconds=60)
    await adapter.__aenter__()
    yield adapter
    await adapter.aclose()


class TestRoundTrip:
    @pytest.mark.asyncio()
    async def test_set_then_get(self, cache: DiskcacheAdapter) -> None:
        await cache.set("kitsu:title:12", "One Piece")
        assert await cache.get("kitsu:title:12") == "One Piece"

    @pytest.mark.asyncio()
    async def test_stores_dicts(self, cache: DiskcacheAdapter) -> None:
        await cache.set("tmdb:find:tt1:en-US", {"id": 1, "title": "X"}, ttl=10)
        assert await cache.get("tmdb:find:tt1:en-US") == {"id": 1, "title": "X"}

    @pytest.mark.asyncio()
    async def test_miss_returns_none(self, cache: DiskcacheAdapter) -> None:
        assert await cache.get("missing") is None

    @pytest.mark.asyncio()
    async def test_exists_and_delete(self, cache: DiskcacheAdapter) -> None:
        await cache.set("k", "v")
        assert await cache.exists("k") is True
        assert await cache.delete("k") is True
        assert await cache.exists("k") is False
        assert await cache.delete("k") is False

    @pytest.mark.asyncio()
    async def test_clear(self, cache: DiskcacheAdapter) -> None:
        await cache.set("a", 1)
        await cache.set("b", 2)
        await cache.clear()
        assert await cache.get("a") is None
        assert await cache.get("b") is None


class TestLifecycle:
    @pytest.mark.asyncio()
    async def test_get_before_open_raises(self, tmp_path: Path) -> None:
        adapter = DiskcacheAdapter(directory=tmp_path / "cache")
        with pytest.raises(RuntimeError, match="not initialized"):
            await adapter.get("k")

    @pytest.mark.asyncio()
    async def test_closed_adapter_is_inert_for_delete(self, tmp_path: Path) -> None:
        adapter = DiskcacheAdapter(directory=tmp_path / "cache")
        assert await adapter.delete("k") is False
        assert await adapter.exists("k") is False

    @pytest.mark.asyncio()
    async def test_context_manager_closes(self, tmp_path: Path) -> None:
        async with DiskcacheAdapter(directory=tmp_path / "cache") as adapter:
            await adapter.set("k", "v")
        with pytest.raises(RuntimeError):
            await adapter.get("k")

    @pytest.mark.asyncio()
    async def test_values_survive_reopen(self, tmp_path: Path) -> None:
        async with DiskcacheAdapter(directory=tmp_path / "cache") as adapter:
            await adapter.set("k", "v")
        async with DiskcacheAdapter(directory=tmp_path / "cache") as adapter:
            assert await adapter.get("k") == "v"
