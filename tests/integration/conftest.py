"""Shared fixtures for integration tests.

These tests use real infrastructure components (DiskcacheAdapter,
SubprocessScraper, HttpxKitsuClient) with mocked HTTP via respx and a
scripted scraper process.
"""

from __future__ import annotations

import sys
import textwrap
from collections.abc import AsyncIterator, Iterator
from pathlib import Path

import httpx
import pytest
import respx

from vixgate.infrastructure.cache.diskcache_adapter import DiskcacheAdapter

# Canned upstream catalog: two listings of the same show, sub and dub.
_SCRAPER_SCRIPT = textwrap.dedent(
    """
    import argparse
    import json

    SEARCH = {
        False: [{"id": 101, "slug": "one-piece", "name": "One Piece"}],
        True: [
            {"id": 202, "slug": "one-piece-ita", "name": "One Piece (ITA)"},
            {"id": 101, "slug": "one-piece", "name": "One Piece"},
        ],
    }
    EPISODES = {
        101: [{"id": 5004, "number": "4"}, {"id": 5005, "number": "5"}],
        202: [{"id": 6004, "number": "4"}],
    }

    parser = argparse.ArgumentParser()
    parser.add_argument("verb")
    parser.add_argument("--query")
    parser.add_argument("--dubbed", action="store_true")
    parser.add_argument("--anime-id", type=int)
    parser.add_argument("--anime-slug")
    parser.add_argument("--episode-id", type=int)
    args = parser.parse_args()

    if args.verb == "search":
        out = SEARCH[args.dubbed] if args.query == "One Piece" else []
    elif args.verb == "get_episodes":
        out = EPISODES.get(args.anime_id, [])
    else:
        out = {
            "mp4_url": f"https://cdn.example/{args.anime_slug}/{args.episode_id}.mp4",
            "embed_url": f"https://embed.example/{args.episode_id}",
        }
    print(json.dumps(out))
    """
)


@pytest.fixture()
def scraper_command(tmp_path: Path) -> list[str]:
    """Argv prefix running the canned scraper script."""
    script = tmp_path / "fake_scraper.py"
    script.write_text(_SCRAPER_SCRIPT, encoding="utf-8")
    return [sys.executable, str(script)]


@pytest.fixture()
def http_client() -> httpx.AsyncClient:
    """Real httpx.AsyncClient for use with respx mocking."""
    return httpx.AsyncClient()


@pytest.fixture()
async def diskcache(tmp_path: Path) -> AsyncIterator[DiskcacheAdapter]:
    """Real DiskcacheAdapter backed by tmp_path (auto-cleaned)."""
    adapter = DiskcacheAdapter(
        directory=tmp_path / "cache",
        ttl_seconds=3600,
        max_concurrent=5,
    )
    async with adapter:
        yield adapter


@pytest.fixture()
def respx_mock() -> Iterator[respx.MockRouter]:
    """Explicit respx mock router for request interception."""
    with respx.mock(assert_all_called=False) as router:
        yield router
