import logging

from flask import Blueprint, jsonify, request
from werkzeug.exceptions import RequestEntityTooLarge

from collection_api.config import UPLOAD_FIELD
from collection_api.errors import UploadRejectedError
from collection_api.api_uploads.uploads_functions import build_upload_payload


logger = logging.getLogger(__name__)

FILE_TOO_LARGE_MESSAGE = "File is too large."


def build_upload_blueprint(max_bytes: int):
    """
    Expose the image upload route under ``/api/uploads``.

    Args:
        max_bytes (int): Largest accepted file size.

    Returns:
        Blueprint: Blueprint with the upload route.
    """
    blueprint = Blueprint("uploads", __name__, url_prefix="/api/uploads")

    @blueprint.route("", methods=["POST"])
    def upload_image():
        """
        Handle POST requests carrying one image under the ``image`` field.

        The image is returned as a data URL and never written to disk. Type
        and size rejections answer 500 with their message; only the
        request-body limit answers 413.

        Returns:
            Response: Flask response with the encoded image or error payload.
        """
        try:
            upload = request.files.get(UPLOAD_FIELD)
            if upload is None or not upload.filename:
                return jsonify({"message": "No file uploaded"}), 400

            payload = build_upload_payload(upload, max_bytes)
            logger.info("image uploaded: %s (%s, %d bytes)", payload["originalName"], payload["mimeType"], payload["size"])
            return jsonify(payload)
        except RequestEntityTooLarge:
            return jsonify({"message": FILE_TOO_LARGE_MESSAGE, "code": "FILE_TOO_LARGE"}), 413
        except UploadRejectedError as error:
            logger.warning("upload rejected: %s", error.message)
            return jsonify(error.to_dict()), error.status_code

    return blueprint
