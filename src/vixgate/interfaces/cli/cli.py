from __future__ import annotations

import argparse
import os
import sys
from collections.abc import Iterable
from pathlib import Path
from typing import Any

import structlog
import uvicorn

from vixgate.infrastructure.config import load_config
from vixgate.infrastructure.logging.setup import configure_logging
from vixgate.interfaces.app import create_app

log = structlog.get_logger(__name__)

DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 7860

# argparse dest -> flat load_config() key; unset flags are not forwarded.
_OVERRIDE_FLAGS: dict[str, str] = {
    "scraper_command": "scraper_command",
    "scraper_timeout": "scraper_timeout_seconds",
    "proxy_url": "proxy_url",
    "proxy_password": "proxy_password",
    "both_links": "proxy_both_links",
    "log_level": "log_level",
    "log_format": "log_format",
}


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="vixgate",
        description="Stremio addon serving anime streams for Kitsu ids.",
    )

    server = parser.add_argument_group("server")
    server.add_argument("--host", help=f"Bind host (HOST env, default {DEFAULT_HOST}).")
    server.add_argument(
        "--port", type=int, help=f"Bind port (PORT env, default {DEFAULT_PORT})."
    )

    files = parser.add_argument_group("configuration files")
    files.add_argument("--config", type=Path, help="YAML config file.")
    files.add_argument("--dotenv", type=Path, help=".env file loaded before env vars.")

    overrides = parser.add_argument_group("overrides (win over YAML and env)")
    overrides.add_argument(
        "--scraper-command",
        help='Scraper argv prefix, e.g. "python3 /opt/animeunity_scraper.py".',
    )
    overrides.add_argument(
        "--scraper-timeout", type=float, help="Per-call scraper timeout in seconds."
    )
    overrides.add_argument("--proxy-url", help="Default MediaFlow proxy URL.")
    overrides.add_argument("--proxy-password", help="Default MediaFlow api_password.")
    overrides.add_argument(
        "--both-links",
        action="store_true",
        default=None,
        help="Emit the direct URL next to the proxied one.",
    )
    overrides.add_argument(
        "--log-level", choices=["DEBUG", "INFO", "WARNING", "ERROR"]
    )
    overrides.add_argument("--log-format", choices=["json", "console"])

    return parser


def _parse_args(argv: Iterable[str] | None) -> argparse.Namespace:
    return _build_parser().parse_args(list(argv) if argv is not None else None)


def build_cli_overrides(args: argparse.Namespace) -> dict[str, Any]:
    """Flat override mapping for load_config() from parsed CLI flags."""
    return {
        key: getattr(args, dest)
        for dest, key in _OVERRIDE_FLAGS.items()
        if getattr(args, dest) is not None
    }


def start(argv: Iterable[str] | None = None) -> None:
    """Process entrypoint: load config once, configure logging, run uvicorn."""
    args = _parse_args(sys.argv[1:] if argv is None else argv)

    host = args.host or os.getenv("HOST", DEFAULT_HOST)
    port = args.port or int(os.getenv("PORT", str(DEFAULT_PORT)))

    config = load_config(
        config_path=args.config,
        dotenv_path=args.dotenv,
        cli_overrides=build_cli_overrides(args),
    )
    log_config = configure_logging(config)
    log.info("server_starting", host=host, port=port, version=config.addon.version)

    uvicorn.run(create_app(config), host=host, port=port, log_config=log_config)


if __name__ == "__main__":
    raise SystemExit(start())
