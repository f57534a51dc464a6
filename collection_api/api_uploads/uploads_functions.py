import base64

from werkzeug.datastructures import FileStorage

from collection_api.errors import UploadRejectedError


def encode_data_url(data: bytes, mime_type: str):
    """
    Wrap raw bytes into a base64 data URL.

    Args:
        data (bytes): File content.
        mime_type (str): MIME type announced for the file.

    Returns:
        str: ``data:<mime_type>;base64,<payload>``.
    """
    encoded = base64.b64encode(data).decode("ascii")
    return f"data:{mime_type};base64,{encoded}"


def check_image_type(mime_type: str | None):
    if not mime_type or not mime_type.startswith("image/"):
        raise UploadRejectedError("Only image files are allowed!")


def read_limited(upload: FileStorage, max_bytes: int):
    """
    Buffer an uploaded file in memory, refusing anything above the limit.

    Args:
        upload (FileStorage): File part of the multipart request.
        max_bytes (int): Largest accepted size.

    Returns:
        bytes: File content.
    """
    data = upload.stream.read(max_bytes + 1)
    if len(data) > max_bytes:
        raise UploadRejectedError("File too large")
    return data


def build_upload_payload(upload: FileStorage, max_bytes: int):
    """
    Validate an image upload and describe it for the client.

    Args:
        upload (FileStorage): File part of the multipart request.
        max_bytes (int): Largest accepted size.

    Returns:
        dict: ``imageData``, ``mimeType``, ``originalName`` and ``size``.
    """
    mime_type = upload.mimetype
    check_image_type(mime_type)
    data = read_limited(upload, max_bytes)
    return {
        "imageData": encode_data_url(data, mime_type),
        "mimeType": mime_type,
        "originalName": upload.filename,
        "size": len(data),
    }
