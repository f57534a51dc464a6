import json
import logging
from datetime import datetime, timezone
from typing import Any

from bson import ObjectId
import redis

from collection_api.errors import InvalidIdError, ValidationError


logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("title", "genre", "status")
PROTECTED_FIELDS = ("_id", "id", "createdAt")


def utc_now():
    """
    Return the current UTC time truncated to milliseconds.

    Returns:
        datetime: Naive UTC datetime, matching what MongoDB hands back.
    """
    now = datetime.now(timezone.utc).replace(tzinfo=None)
    return now.replace(microsecond=(now.microsecond // 1000) * 1000)


def format_timestamp(value: datetime):
    """
    Render a datetime as an ISO 8601 string with milliseconds and ``Z``.

    Args:
        value (datetime): Naive UTC or timezone-aware datetime.

    Returns:
        str: Timestamp such as ``2025-01-01T10:00:00.000Z``.
    """
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value.isoformat(timespec="milliseconds") + "Z"


def serialize_value(value: Any):
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, datetime):
        return format_timestamp(value)
    if isinstance(value, dict):
        return {key: serialize_value(item) for key, item in value.items()}
    if isinstance(value, list):
        return [serialize_value(item) for item in value]
    return value


def serialize_document(document: dict | None):
    """
    Convert a MongoDB document into a JSON-friendly dictionary.

    Args:
        document (dict | None): Document from the collection.

    Returns:
        dict: Copy with ``_id`` as a string, mirrored under ``id``, and
        timestamps rendered as ISO strings.
    """
    if not document:
        return {}
    serialized = {key: serialize_value(value) for key, value in document.items()}
    if "_id" in serialized:
        serialized["id"] = serialized["_id"]
    return serialized


def parse_object_id(raw_id: str, noun: str):
    """
    Turn a path segment into an ObjectId.

    Args:
        raw_id (str): Identifier from the URL.
        noun (str): Resource noun for the error message.

    Returns:
        ObjectId: Parsed identifier.

    Raises:
        InvalidIdError: When the identifier is not a valid ObjectId.
    """
    if not ObjectId.is_valid(raw_id):
        raise InvalidIdError(f"Invalid {noun.lower()} ID")
    return ObjectId(raw_id)


def is_blank(value: Any):
    return not value or not isinstance(value, str) or value.strip() == ""


def validate_required_fields(payload: dict):
    """
    Check title, genre and status in that order; the first failure wins.

    Args:
        payload (dict): Body sent by the client.

    Raises:
        ValidationError: For the first missing or blank field.
    """
    for field in REQUIRED_FIELDS:
        if is_blank(payload.get(field)):
            raise ValidationError(f"{field.capitalize()} is required and cannot be empty.")


def build_create_document(payload: dict, now: datetime):
    document = {key: value for key, value in payload.items() if key not in PROTECTED_FIELDS}
    document["createdAt"] = now
    document["updatedAt"] = now
    return document


def build_update_fields(payload: dict, now: datetime):
    updates = {key: value for key, value in payload.items() if key not in PROTECTED_FIELDS}
    updates["updatedAt"] = now
    return updates


def build_cache_key(prefix: str, *parts: Any):
    """
    Build a Redis cache key with a prefix and optional segments.

    Args:
        prefix (str): Root part of the key.
        *parts: Additional segments.

    Returns:
        str: Colon-separated cache key.
    """
    normalized = [prefix]
    for part in parts:
        normalized.append(str(part) if part is not None else "")
    return ":".join(normalized)


def read_cached(redis_client: redis.Redis | None, cache_key: str):
    """
    Read a cached JSON payload.

    Args:
        redis_client (Redis | None): Redis client, or None when caching is off.
        cache_key (str): Key to read.

    Returns:
        Any: Decoded payload, or None on a miss or a cache failure.
    """
    if redis_client is None:
        return None
    try:
        cached = redis_client.get(cache_key)
    except redis.RedisError as error:
        logger.warning("cache read failed for %s: %s", cache_key, error)
        return None
    if not cached:
        logger.debug("cache miss %s", cache_key)
        return None
    try:
        payload = json.loads(cached)
    except json.JSONDecodeError:
        return None
    logger.debug("cache hit %s", cache_key)
    return payload


def write_cached(redis_client: redis.Redis | None, cache_key: str, cache_ttl: int, payload: Any):
    if redis_client is None:
        return
    try:
        redis_client.setex(cache_key, cache_ttl, json.dumps(payload))
    except redis.RedisError as error:
        logger.warning("cache write failed for %s: %s", cache_key, error)


def invalidate_resource_cache(redis_client: redis.Redis | None, prefix: str):
    """
    Drop every cached entry of one resource after a write.

    Args:
        redis_client (Redis | None): Redis client, or None when caching is off.
        prefix (str): Collection name used as key prefix.
    """
    if redis_client is None:
        return
    try:
        for key in redis_client.scan_iter(f"{prefix}:*"):
            redis_client.delete(key)
    except redis.RedisError as error:
        logger.warning("cache invalidation failed for %s: %s", prefix, error)
