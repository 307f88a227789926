"""Hardcoded default configuration values."""

from __future__ import annotations

from typing import Any

DEFAULT_CONFIG: dict[str, Any] = {
    "app_name": "vixgate",
    "environment": "dev",
    "http": {
        "timeout_seconds": 15.0,
        "follow_redirects": True,
        "user_agent": "VixGate/0.1.0",
    },
    "logging": {
        "level": "INFO",
        "format": None,  # Derived from environment in schema.py
    },
    "cache": {
        "dir": "./.cache/vixgate",
        "ttl_seconds": 86_400,
        "max_concurrent": 10,
    },
    "scraper": {
        "command": ["python3", "animeunity_scraper.py"],
        "timeout_seconds": 30.0,
    },
    "provider": {
        "enabled": True,
        "label": "AnimeUnity",
        "dub_marker": "(ita)",
        "dub_label": "ITA",
        "variants": ["SUB", "DUB"],
        "namespaces": ["kitsu"],
    },
    "proxy": {
        "url": "",
        "password": "",
        "both_links": False,
    },
}
