"""Stremio addon API endpoints (manifest, stream, redirect)."""

from __future__ import annotations

from typing import Any, cast
from urllib.parse import urlparse

import structlog
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse, PlainTextResponse, RedirectResponse
from starlette.responses import Response

from vixgate.infrastructure.config.schema import AppConfig
from vixgate.infrastructure.config.user_config import (
    build_request_settings,
    parse_user_config,
)
from vixgate.interfaces.app_state import AppState

log = structlog.get_logger(__name__)

router = APIRouter(tags=["stremio"])

_CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "*",
}

_CONTENT_TYPES = frozenset({"movie", "series"})

# Fields shown on the Stremio "configure" page; values come back in {config}.
_CONFIG_FIELDS: list[dict[str, str]] = [
    {
        "key": "mediaFlowProxyUrl",
        "title": "MediaFlow Proxy URL",
        "type": "text",
    },
    {
        "key": "mediaFlowProxyPassword",
        "title": "MediaFlow Proxy Password",
        "type": "password",
    },
    {
        "key": "bothLinks",
        "title": "Show both links (Proxy and Direct)",
        "type": "checkbox",
    },
    {
        "key": "animeunityEnabled",
        "title": "Enable AnimeUnity (Kitsu Catalog)",
        "type": "checkbox",
    },
]


def build_manifest(config: AppConfig) -> dict[str, Any]:
    """Build the Stremio addon manifest from the ``addon`` config section."""
    addon = config.addon
    manifest: dict[str, Any] = {
        "id": addon.id,
        "version": addon.version,
        "name": addon.name,
        "description": addon.description,
        "types": ["movie", "series"],
        "idPrefixes": ["tt", "kitsu"],
        "catalogs": [],
        "resources": ["stream"],
        "behaviorHints": {
            "configurable": True,
        },
        "config": [dict(field) for field in _CONFIG_FIELDS],
    }
    if addon.logo:
        manifest["logo"] = addon.logo
    return manifest


def _state(request: Request) -> AppState:
    return cast(AppState, request.app.state)


@router.get("/manifest.json")
async def manifest(request: Request) -> JSONResponse:
    """Serve the Stremio addon manifest."""
    return JSONResponse(
        content=build_manifest(_state(request).config),
        headers=_CORS_HEADERS,
    )


@router.get("/stream/animeunity/{url:path}")
async def stream_redirect(url: str) -> Response:
    """302 to a percent-decoded media URL."""
    # the path is already percent-decoded by the ASGI server
    if urlparse(url).scheme not in ("http", "https"):
        log.warning("stream_redirect_rejected", url=url[:200])
        return PlainTextResponse("Invalid redirect target.", status_code=400)
    log.info("stream_redirect", url=url[:200])
    return RedirectResponse(url, status_code=302)


# Must stay below stream_redirect; {config:path} also matches redirect paths.
@router.get("/{config:path}/manifest.json")
async def manifest_configured(request: Request, config: str) -> JSONResponse:
    """Serve the manifest under a user-configured addon URL."""
    return await manifest(request)


async def _resolve_streams(
    request: Request,
    content_type: str,
    stream_id: str,
    user_segment: str | None,
) -> JSONResponse:
    state = _state(request)

    if content_type not in _CONTENT_TYPES:
        log.debug("stream_unknown_type", content_type=content_type)
        return JSONResponse(content={"streams": []}, headers=_CORS_HEADERS)

    settings = build_request_settings(state.config, parse_user_config(user_segment))
    log.info(
        "stream_request",
        content_type=content_type,
        stream_id=stream_id,
        configured=user_segment is not None,
        proxied=settings.proxy_configured,
    )

    streams = await state.stream_uc.execute(stream_id, settings)

    return JSONResponse(
        content={"streams": [s.to_stremio() for s in streams]},
        headers=_CORS_HEADERS,
    )


@router.get("/stream/{content_type}/{stream_id}.json")
async def stream(request: Request, content_type: str, stream_id: str) -> JSONResponse:
    """Resolve streams for a movie or episode with the server defaults."""
    return await _resolve_streams(request, content_type, stream_id, None)


@router.get("/{config:path}/stream/{content_type}/{stream_id}.json")
async def stream_configured(
    request: Request,
    config: str,
    content_type: str,
    stream_id: str,
) -> JSONResponse:
    """Resolve streams using the addon configuration carried in the URL."""
    return await _resolve_streams(request, content_type, stream_id, config)
