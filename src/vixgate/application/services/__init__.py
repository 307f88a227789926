from .episode_resolver import MOVIE_EPISODE_NUMBER, EpisodeResolver
from .stream_finalizer import StreamFinalizer
from .title_normalizer import normalize_title
from .version_aggregator import VersionAggregator, classify_language

__all__ = [
    "MOVIE_EPISODE_NUMBER",
    "EpisodeResolver",
    "StreamFinalizer",
    "VersionAggregator",
    "classify_language",
    "normalize_title",
]
