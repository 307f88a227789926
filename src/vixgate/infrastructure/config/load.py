"""Layered configuration loading: defaults < YAML < environment < CLI."""

from __future__ import annotations

from copy import deepcopy
from pathlib import Path
from typing import Any, Mapping

import yaml
from dotenv import load_dotenv

from .defaults import DEFAULT_CONFIG
from .schema import AppConfig, EnvOverrides

_SECTIONS = ("http", "logging", "cache", "scraper", "provider", "proxy", "addon")
_TOP_LEVEL = ("app_name", "environment", "tmdb_api_key")

# Flat keys (env vars, CLI flags) and the section entry each one sets.
_FLAT_KEYS: dict[str, tuple[str, str]] = {
    "http_timeout_seconds": ("http", "timeout_seconds"),
    "http_follow_redirects": ("http", "follow_redirects"),
    "http_user_agent": ("http", "user_agent"),
    "log_level": ("logging", "level"),
    "log_format": ("logging", "format"),
    "cache_dir": ("cache", "dir"),
    "cache_ttl_seconds": ("cache", "ttl_seconds"),
    "scraper_command": ("scraper", "command"),
    "scraper_timeout_seconds": ("scraper", "timeout_seconds"),
    "provider_enabled": ("provider", "enabled"),
    "proxy_url": ("proxy", "url"),
    "proxy_password": ("proxy", "password"),
    "proxy_both_links": ("proxy", "both_links"),
}


def _merge_into(target: dict[str, Any], layer: Mapping[str, Any]) -> None:
    """Nested mappings merge key by key; any other value replaces."""
    for key, value in layer.items():
        current = target.get(key)
        if isinstance(current, dict) and isinstance(value, Mapping):
            _merge_into(current, value)
        else:
            target[key] = value


def _sectioned(data: Mapping[str, Any]) -> dict[str, Any]:
    """Bring a layer into the sectioned shape of ``AppConfig.to_sectioned_dict``.

    Sections and top-level keys pass through; flat keys are moved into their
    section. Unknown keys are dropped.
    """
    out: dict[str, Any] = {
        name: dict(data[name])
        for name in _SECTIONS
        if isinstance(data.get(name), Mapping)
    }
    out.update({key: data[key] for key in _TOP_LEVEL if key in data})
    for flat_key, (section, entry) in _FLAT_KEYS.items():
        if flat_key in data:
            out.setdefault(section, {})[entry] = data[flat_key]
    return out


def _yaml_layer(path: Path) -> dict[str, Any]:
    if not path.exists():
        raise FileNotFoundError(path)
    parsed = yaml.safe_load(path.read_text(encoding="utf-8"))
    if parsed is None:
        return {}
    if not isinstance(parsed, dict):
        raise ValueError(f"Config YAML must be a mapping, got: {type(parsed)!r}")
    return parsed


def load_config(
    *,
    config_path: Path | None = None,
    dotenv_path: Path | None = None,
    cli_overrides: dict[str, Any] | None = None,
) -> AppConfig:
    """Merge all configuration layers and validate them into ``AppConfig``.

    A ``.env`` file is loaded into the process environment first and takes
    part as environment variables, without overriding variables that are
    already set. Nothing is created on disk.
    """
    if dotenv_path is not None:
        if not dotenv_path.exists():
            raise FileNotFoundError(dotenv_path)
        load_dotenv(dotenv_path, override=False)

    layers: list[Mapping[str, Any]] = []
    if config_path is not None:
        layers.append(_yaml_layer(config_path))
    layers.append(EnvOverrides().to_update_dict())
    layers.append(cli_overrides or {})

    merged = _sectioned(deepcopy(DEFAULT_CONFIG))
    for layer in layers:
        _merge_into(merged, _sectioned(layer))

    return AppConfig.model_validate(merged)
