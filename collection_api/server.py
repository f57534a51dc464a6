import logging
from io import BytesIO

from flask import Flask, Request, jsonify
from flask_cors import CORS
import redis
from werkzeug.exceptions import HTTPException, InternalServerError

from collection_api.config import RESOURCES, Settings, load_settings
from collection_api.errors import ApiError
from collection_api.store import DocumentStore, build_cache
from collection_api.api_resources.resources import ResourceController, build_resource_blueprint
from collection_api.api_uploads.uploads import build_upload_blueprint


class InMemoryRequest(Request):
    """Request that keeps uploaded files in memory instead of temp files."""

    def _get_file_stream(self, total_content_length, content_type, filename=None, content_length=None):
        return BytesIO()


def configure_logging(app: Flask, level: str):
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    app.logger.setLevel(level)


def register_error_handlers(app: Flask):
    @app.errorhandler(ApiError)
    def handle_api_error(error: ApiError):
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(error: HTTPException):
        return jsonify({"message": error.description}), error.code

    @app.errorhandler(InternalServerError)
    def handle_internal_error(error: InternalServerError):
        original = error.original_exception
        if original is None:
            return jsonify({"message": error.description}), 500
        app.logger.exception("unhandled error", exc_info=original)
        return jsonify({"message": str(original)}), 500


def create_app(settings: Settings | None = None, store: DocumentStore | None = None, cache: redis.Redis | None = None):
    """
    Build the Flask application.

    Args:
        settings (Settings | None): Settings, loaded from the environment when omitted.
        store (DocumentStore | None): Document store, built from settings when omitted.
        cache (Redis | None): Read cache, built from settings when omitted.

    Returns:
        Flask: Configured application with the store connected.
    """
    settings = settings or load_settings()
    if store is None:
        store = DocumentStore.from_settings(settings)
    if cache is None:
        cache = build_cache(settings)

    app = Flask(__name__)
    app.request_class = InMemoryRequest
    app.json.sort_keys = False
    app.config["MAX_CONTENT_LENGTH"] = settings.max_body_bytes
    app.config["MAX_FORM_MEMORY_SIZE"] = settings.max_body_bytes
    app.config["SETTINGS"] = settings
    CORS(app)
    configure_logging(app, settings.log_level)

    store.connect()
    app.extensions["document_store"] = store

    for collection_name, noun in RESOURCES.items():
        controller = ResourceController(store, collection_name, noun, cache=cache, cache_ttl=settings.cache_ttl_seconds)
        app.register_blueprint(build_resource_blueprint(controller))
    app.register_blueprint(build_upload_blueprint(settings.upload_max_bytes))
    register_error_handlers(app)

    @app.route("/", methods=["GET"])
    def read_root():
        return jsonify({"message": "Collection API is running!"})

    return app


def main():
    settings = load_settings()
    app = create_app(settings)
    store = app.extensions["document_store"]
    try:
        app.logger.info("Server is running on port %s", settings.port)
        app.run(host=settings.host, port=settings.port)
    finally:
        store.close()


if __name__ == "__main__":
    main()
