import logging

from flask import Blueprint, jsonify, request
from pymongo import DESCENDING
from bson.errors import BSONError
from pymongo.errors import PyMongoError
import redis

from collection_api.errors import NotFoundError
from collection_api.store import DocumentStore
from collection_api.api_resources.resources_functions import (
    build_cache_key,
    build_create_document,
    build_update_fields,
    invalidate_resource_cache,
    parse_object_id,
    read_cached,
    serialize_document,
    utc_now,
    validate_required_fields,
    write_cached,
)


logger = logging.getLogger(__name__)

# documents the driver can not encode fail before reaching the server
WRITE_ERRORS = (PyMongoError, BSONError, OverflowError)


class ResourceController:
    """
    CRUD operations for one collection of tracked items.

    The movies, games and books resources only differ in the collection they
    read and the noun used in their messages.
    """

    def __init__(self, store: DocumentStore, collection_name: str, noun: str, cache: redis.Redis | None = None, cache_ttl: int = 600):
        self.store = store
        self.collection_name = collection_name
        self.noun = noun
        self.cache = cache
        self.cache_ttl = cache_ttl

    @property
    def collection(self):
        return self.store.collection(self.collection_name)

    def list(self):
        """
        Return every document, most recently created first.

        Returns:
            list[dict]: Serialized documents.
        """
        cache_key = build_cache_key(self.collection_name, "list")
        cached = read_cached(self.cache, cache_key)
        if cached is not None:
            return cached

        cursor = self.collection.find({}).sort("createdAt", DESCENDING)
        documents = [serialize_document(document) for document in cursor]
        write_cached(self.cache, cache_key, self.cache_ttl, documents)
        return documents

    def get(self, item_id: str):
        """
        Return a single document.

        Args:
            item_id (str): Identifier taken from the path segment.

        Returns:
            dict: Serialized document.
        """
        object_id = parse_object_id(item_id, self.noun)
        cache_key = build_cache_key(self.collection_name, "detail", item_id)
        cached = read_cached(self.cache, cache_key)
        if cached is not None:
            return cached

        document = self.collection.find_one({"_id": object_id})
        if not document:
            raise NotFoundError(f"{self.noun} not found")

        serialized = serialize_document(document)
        write_cached(self.cache, cache_key, self.cache_ttl, serialized)
        return serialized

    def create(self, payload: dict):
        """
        Validate and insert a new document.

        Args:
            payload (dict): Entity fields sent by the client.

        Returns:
            dict: The stored document, including its identifier and timestamps.
        """
        validate_required_fields(payload)
        document = build_create_document(payload, utc_now())
        result = self.collection.insert_one(document)
        created = self.collection.find_one({"_id": result.inserted_id})
        invalidate_resource_cache(self.cache, self.collection_name)
        logger.info("%s created (%s)", self.noun, result.inserted_id)
        return serialize_document(created)

    def update(self, item_id: str, payload: dict):
        """
        Merge the supplied fields into an existing document.

        ``createdAt`` and the identifier can not be overridden; fields absent
        from the payload keep their stored value.

        Args:
            item_id (str): Identifier taken from the path segment.
            payload (dict): Entity fields sent by the client.

        Returns:
            dict: The document after the write.
        """
        object_id = parse_object_id(item_id, self.noun)
        validate_required_fields(payload)
        updates = build_update_fields(payload, utc_now())
        result = self.collection.update_one({"_id": object_id}, {"$set": updates})
        if result.matched_count == 0:
            raise NotFoundError(f"{self.noun} not found")

        updated = self.collection.find_one({"_id": object_id})
        invalidate_resource_cache(self.cache, self.collection_name)
        return serialize_document(updated)

    def delete(self, item_id: str):
        object_id = parse_object_id(item_id, self.noun)
        result = self.collection.delete_one({"_id": object_id})
        if result.deleted_count == 0:
            raise NotFoundError(f"{self.noun} not found")

        invalidate_resource_cache(self.cache, self.collection_name)
        logger.info("%s deleted (%s)", self.noun, item_id)
        return {"message": f"{self.noun} deleted successfully"}


def read_payload():
    """
    Read the entity fields from a JSON or url-encoded body.

    Returns:
        dict: Submitted fields, empty when the body carries no object.
    """
    payload = request.get_json(silent=True)
    if isinstance(payload, dict):
        return payload
    return request.form.to_dict()


def store_failure(error: Exception, status_code: int):
    logger.error("store operation failed: %s", error)
    return jsonify({"message": str(error)}), status_code


def build_resource_blueprint(controller: ResourceController):
    """
    Expose a controller under ``/api/<collection>``.

    Args:
        controller (ResourceController): Controller bound to one collection.

    Returns:
        Blueprint: Blueprint with the list, detail, create, update and delete routes.
    """
    blueprint = Blueprint(controller.collection_name, __name__, url_prefix=f"/api/{controller.collection_name}")

    @blueprint.route("", methods=["GET"])
    def list_items():
        """
        Handle GET requests for the whole collection.

        Returns:
            Response: Flask response with the documents or error payload.
        """
        try:
            return jsonify(controller.list())
        except PyMongoError as error:
            return store_failure(error, 500)

    @blueprint.route("/<item_id>", methods=["GET"])
    def get_item(item_id: str):
        try:
            return jsonify(controller.get(item_id))
        except PyMongoError as error:
            return store_failure(error, 500)

    @blueprint.route("", methods=["POST"])
    def create_item():
        """
        Handle POST requests that create a document.

        Returns:
            Response: Flask response with the created document and 201.
        """
        payload = read_payload()
        try:
            return jsonify(controller.create(payload)), 201
        except WRITE_ERRORS as error:
            return store_failure(error, 400)

    @blueprint.route("/<item_id>", methods=["PUT"])
    def update_item(item_id: str):
        payload = read_payload()
        try:
            return jsonify(controller.update(item_id, payload))
        except WRITE_ERRORS as error:
            return store_failure(error, 400)

    @blueprint.route("/<item_id>", methods=["DELETE"])
    def delete_item(item_id: str):
        """
        Handle DELETE requests for a document.

        Args:
            item_id (str): Identifier taken from the path segment.

        Returns:
            Response: Flask response with the confirmation message.
        """
        try:
            return jsonify(controller.delete(item_id))
        except PyMongoError as error:
            return store_failure(error, 500)

    return blueprint
