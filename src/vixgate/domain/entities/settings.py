"""Per-request configuration value passed explicitly into every component."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class RequestSettings:
    """Effective settings for one stream request.

    Built from process-wide defaults overlaid with the addon configuration
    the client sent in the request URL.
    """

    enabled: bool = True
    proxy_url: str = ""
    proxy_password: str = ""
    both_links: bool = False
    include_embed: bool = False

    @property
    def proxy_configured(self) -> bool:
        return bool(self.proxy_url and self.proxy_password)
