from .catalog import (
    CatalogId,
    CatalogNamespace,
    ClassifiedVersion,
    Episode,
    RawStream,
    StreamDescriptor,
    Version,
    VersionLanguage,
    VersionOutcome,
)
from .settings import RequestSettings

__all__ = [
    "CatalogId",
    "CatalogNamespace",
    "ClassifiedVersion",
    "Episode",
    "RawStream",
    "RequestSettings",
    "StreamDescriptor",
    "Version",
    "VersionLanguage",
    "VersionOutcome",
]
