from .cache import CachePort
from .metadata import MetadataLookupPort
from .scraper import ScraperPort

__all__ = [
    "CachePort",
    "MetadataLookupPort",
    "ScraperPort",
]
