import logging

from pymongo import MongoClient
from pymongo.collection import Collection
import redis

from collection_api.config import Settings


logger = logging.getLogger(__name__)


class DocumentStore:
    """Owns the MongoDB client and hands out collection handles."""

    def __init__(self, uri: str, database_name: str, client: MongoClient | None = None):
        self.uri = uri
        self.database_name = database_name
        self._client = client
        self._db = None

    @classmethod
    def from_settings(cls, settings: Settings):
        return cls(settings.mongo_uri, settings.mongo_db)

    @property
    def connected(self):
        return self._db is not None

    def connect(self):
        """
        Open the MongoDB client, or adopt the injected one.

        Returns:
            DocumentStore: The connected store.
        """
        if self._db is not None:
            return self
        if self._client is None:
            self._client = MongoClient(self.uri)
        self._db = self._client[self.database_name]
        logger.info("MongoDB connected (database=%s)", self.database_name)
        return self

    def close(self):
        if self._client is not None:
            self._client.close()
            logger.info("MongoDB connection closed")
        self._client = None
        self._db = None

    def collection(self, name: str) -> Collection:
        if self._db is None:
            raise RuntimeError("Document store is not connected")
        return self._db[name]


def build_cache(settings: Settings):
    """
    Create the Redis client used as read cache.

    Args:
        settings (Settings): Application settings.

    Returns:
        redis.Redis | None: Client when caching is enabled, otherwise None.
    """
    if not settings.cache_enabled:
        return None
    return redis.Redis(
        host=settings.redis_host,
        port=settings.redis_port,
        db=settings.redis_db,
    )
