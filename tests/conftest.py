"""Pytest configuration shared by the API and client tests."""

import fakeredis
import mongomock
import pytest

from collection_api.config import load_settings
from collection_api.server import create_app
from collection_api.store import DocumentStore


@pytest.fixture
def settings():
    return load_settings({"log_level": "WARNING", "cache_enabled": False})


@pytest.fixture
def store(settings):
    document_store = DocumentStore(settings.mongo_uri, settings.mongo_db, client=mongomock.MongoClient())
    yield document_store
    document_store.close()


@pytest.fixture
def app(settings, store):
    application = create_app(settings, store=store)
    application.config["TESTING"] = True
    return application


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def redis_client():
    return fakeredis.FakeRedis()


@pytest.fixture
def cached_client(settings, store, redis_client):
    application = create_app(settings, store=store, cache=redis_client)
    application.config["TESTING"] = True
    return application.test_client()
