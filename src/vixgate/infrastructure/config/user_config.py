"""Request-scoped addon configuration sent by the client in the URL path.

Stremio encodes the user's addon settings as URL-encoded JSON in the first
path segment (``/{config}/stream/series/kitsu:1:2.json``). Checkbox values
arrive as ``"on"``.
"""

from __future__ import annotations

import json
from typing import Any, Optional
from urllib.parse import unquote

import structlog
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from vixgate.domain.entities.settings import RequestSettings
from vixgate.infrastructure.config.schema import AppConfig

log = structlog.get_logger(__name__)

_TRUTHY = {"on", "true", "1", "yes"}


class AddonUserConfig(BaseModel):
    """Settings a user can set from the addon configuration page."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    media_flow_proxy_url: Optional[str] = Field(default=None, alias="mediaFlowProxyUrl")
    media_flow_proxy_password: Optional[str] = Field(
        default=None, alias="mediaFlowProxyPassword"
    )
    both_links: Optional[Any] = Field(default=None, alias="bothLinks")
    animeunity_enabled: Optional[Any] = Field(default=None, alias="animeunityEnabled")


def _checkbox(value: Any) -> bool | None:
    """Interpret a checkbox-style value; None means "not provided"."""
    if value is None:
        return None
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in _TRUTHY


def parse_user_config(segment: str | None) -> AddonUserConfig:
    """Decode the ``{config}`` path segment; malformed input yields an empty config.

    Accepts the segment either as plain JSON (already decoded by the ASGI
    server) or still percent-encoded.
    """
    if not segment:
        return AddonUserConfig()
    try:
        data = json.loads(segment)
    except ValueError:
        try:
            data = json.loads(unquote(segment))
        except ValueError:
            log.debug("user_config_not_json", segment=segment[:80])
            return AddonUserConfig()
    if not isinstance(data, dict):
        log.debug("user_config_not_object", segment=segment[:80])
        return AddonUserConfig()
    try:
        return AddonUserConfig.model_validate(data)
    except ValidationError:
        log.debug("user_config_invalid", segment=segment[:80], exc_info=True)
        return AddonUserConfig()


def build_request_settings(
    config: AppConfig,
    user: AddonUserConfig | None = None,
) -> RequestSettings:
    """Overlay the user's addon config on top of the process-wide defaults.

    A checkbox the user sent decides on its own; an absent one falls back to
    the configured default.
    """
    user = user or AddonUserConfig()

    enabled = _checkbox(user.animeunity_enabled)
    both_links = _checkbox(user.both_links)

    return RequestSettings(
        enabled=config.provider.enabled if enabled is None else enabled,
        proxy_url=(user.media_flow_proxy_url or config.proxy.url).strip(),
        proxy_password=(
            user.media_flow_proxy_password or config.proxy.password
        ).strip(),
        both_links=config.proxy.both_links if both_links is None else both_links,
        include_embed=config.proxy.include_embed,
    )
