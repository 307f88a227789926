"""Port for catalog metadata lookups (id -> canonical title)."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from vixgate.domain.entities.catalog import CatalogId


@runtime_checkable
class MetadataLookupPort(Protocol):
    """Async title lookup for a parsed catalog id."""

    async def get_title(self, catalog_id: CatalogId) -> str | None:
        """Return the canonical title, or None when the id is unknown."""
        ...
