"""MediaFlow proxy URL rewriting.

Routes a direct media URL through a MediaFlow-style proxy that injects the
headers the CDN requires::

    {base}/proxy/stream/{filename}?d={quoted url}&api_password={password}

The filename and the password are percent-encoded as well.
"""

from __future__ import annotations

import re
from urllib.parse import quote, unquote, urlparse

_FILENAME_PARAM_RE = re.compile(r"filename=([^&]+)")
_DEFAULT_FILENAME = "video.mp4"


def extract_filename(url: str) -> str:
    """Derive the filename shown in the proxy path.

    Prefers a ``filename=`` query value, then the last path segment,
    then ``video.mp4``.

    >>> extract_filename("https://cdn.example/dl?token=x&filename=Ep%2001.mp4")
    'Ep 01.mp4'
    >>> extract_filename("http://x/video.mp4")
    'video.mp4'
    """
    m = _FILENAME_PARAM_RE.search(url)
    if m:
        return unquote(m.group(1))
    last_segment = urlparse(url).path.rsplit("/", 1)[-1]
    return last_segment or _DEFAULT_FILENAME


def format_proxy_url(raw_url: str, proxy_base: str, password: str) -> str:
    """Rewrite *raw_url* into its proxied form."""
    base = proxy_base.rstrip("/")
    filename = extract_filename(raw_url)
    encoded = quote(raw_url, safe="!~*'()")
    return (
        f"{base}/proxy/stream/{quote(filename, safe='')}"
        f"?d={encoded}&api_password={quote(password, safe='')}"
    )
