class ApiError(Exception):
    """Error carrying the HTTP status and message returned to the caller."""

    status_code = 400

    def __init__(self, message: str, status_code: int | None = None, code: str | None = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.code = code

    def to_dict(self):
        payload = {"message": self.message}
        if self.code:
            payload["code"] = self.code
        return payload


class InvalidIdError(ApiError):
    status_code = 400


class ValidationError(ApiError):
    status_code = 400


class NotFoundError(ApiError):
    status_code = 404


class UploadRejectedError(ApiError):
    # type and size rejections leave the upload route as a generic failure
    status_code = 500
