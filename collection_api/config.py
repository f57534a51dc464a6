import os
from dataclasses import dataclass, replace


MOVIES_COLLECTION = "movies"
GAMES_COLLECTION = "games"
BOOKS_COLLECTION = "books"

# collection name -> noun used in messages
RESOURCES = {
    MOVIES_COLLECTION: "Movie",
    GAMES_COLLECTION: "Game",
    BOOKS_COLLECTION: "Book",
}

UPLOAD_FIELD = "image"


def parse_boolean(value: str | None, default: bool = False):
    """
    Parse an environment value into a boolean.

    Args:
        value (str | None): Raw value from the environment.
        default (bool): Fallback when the value is empty.

    Returns:
        bool: Parsed boolean.
    """
    if value is None:
        return default
    normalized = value.strip().lower()
    if not normalized:
        return default
    return normalized in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    host: str = "0.0.0.0"
    port: int = 5000
    mongo_uri: str = "mongodb://localhost:27017"
    mongo_db: str = "fullstack-app"
    redis_host: str = "localhost"
    redis_port: int = 6379
    redis_db: int = 0
    cache_enabled: bool = False
    cache_ttl_seconds: int = 600
    max_body_bytes: int = 50 * 1024 * 1024
    upload_max_bytes: int = 5 * 1024 * 1024
    log_level: str = "INFO"
    api_base_url: str = "http://localhost:5000/api"
    api_timeout: float = 10.0


def load_settings(overrides: dict | None = None):
    """
    Build settings from the environment.

    Args:
        overrides (dict | None): Values that win over the environment.

    Returns:
        Settings: Frozen settings object.
    """
    settings = Settings(
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", 5000)),
        mongo_uri=os.getenv("MONGODB_URI", "mongodb://localhost:27017"),
        mongo_db=os.getenv("MONGODB_DB", "fullstack-app"),
        redis_host=os.environ.get("REDIS_HOST", "localhost"),
        redis_port=int(os.environ.get("REDIS_PORT", 6379)),
        redis_db=int(os.environ.get("REDIS_DB", 0)),
        cache_enabled=parse_boolean(os.environ.get("CACHE_ENABLED")),
        cache_ttl_seconds=int(os.environ.get("CACHE_TTL_SECONDS", 600)),
        max_body_bytes=int(os.getenv("MAX_BODY_BYTES", 50 * 1024 * 1024)),
        upload_max_bytes=int(os.getenv("UPLOAD_MAX_BYTES", 5 * 1024 * 1024)),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        api_base_url=os.getenv("API_BASE_URL", "http://localhost:5000/api"),
        api_timeout=float(os.getenv("API_TIMEOUT", 10)),
    )
    if overrides:
        settings = replace(settings, **overrides)
    return settings
