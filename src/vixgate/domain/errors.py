"""Domain exceptions."""

from __future__ import annotations


class VixgateError(Exception):
    """Base class for all vixgate errors."""


class CatalogIdParseError(VixgateError):
    """Raised when a raw catalog id string cannot be parsed."""


class ScraperError(VixgateError):
    """Base class for failures of the external scraper command."""


class ScraperProcessError(ScraperError):
    """Raised when the scraper cannot be started or exits with a non-zero code."""

    def __init__(
        self,
        message: str,
        *,
        returncode: int | None = None,
        stderr: str = "",
    ) -> None:
        super().__init__(message)
        self.returncode = returncode
        self.stderr = stderr


class ScraperOutputError(ScraperError):
    """Raised when scraper stdout is not JSON of the expected shape."""


class ScraperTimeoutError(ScraperError):
    """Raised when a scraper call exceeds its time budget."""
