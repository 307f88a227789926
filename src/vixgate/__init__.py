"""Stremio stream-resolution gateway for anime catalogs."""

__version__ = "0.1.0"
