"""Dispatch title lookups to the client serving the id's namespace."""

from __future__ import annotations

from collections.abc import Mapping

import structlog

from vixgate.domain.entities.catalog import CatalogId
from vixgate.domain.ports.metadata import MetadataLookupPort

log = structlog.get_logger(__name__)


class MetadataRouter:
    """``MetadataLookupPort`` composed of one lookup per namespace."""

    def __init__(self, lookups: Mapping[str, MetadataLookupPort]) -> None:
        self._lookups = dict(lookups)

    @property
    def namespaces(self) -> list[str]:
        return sorted(self._lookups)

    async def get_title(self, catalog_id: CatalogId) -> str | None:
        lookup = self._lookups.get(catalog_id.namespace)
        if lookup is None:
            log.debug("metadata_namespace_unsupported", namespace=catalog_id.namespace)
            return None
        return await lookup.get_title(catalog_id)
