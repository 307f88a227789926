from .kitsu_client import HttpxKitsuClient
from .router import MetadataRouter
from .tmdb_client import HttpxTmdbClient

__all__ = ["HttpxKitsuClient", "HttpxTmdbClient", "MetadataRouter"]
