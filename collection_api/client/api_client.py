import requests


# type tag used by the client -> REST resource
RESOURCE_BY_TYPE = {
    "series": "movies",
    "game": "games",
    "book": "books",
}
DEFAULT_TYPE = "series"


class ResourceAPI:
    """Thin wrapper over the REST routes of one resource."""

    def __init__(self, session: requests.Session, base_url: str, resource: str, timeout: float = 10.0):
        self.session = session
        self.url = f"{base_url.rstrip('/')}/{resource}"
        self.timeout = timeout

    def _send(self, method: str, url: str, **kwargs):
        response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        response.raise_for_status()
        return response.json()

    def get_all(self):
        return self._send("GET", self.url)

    def get_by_id(self, item_id: str):
        return self._send("GET", f"{self.url}/{item_id}")

    def create(self, data: dict):
        return self._send("POST", self.url, json=data)

    def update(self, item_id: str, data: dict):
        return self._send("PUT", f"{self.url}/{item_id}", json=data)

    def delete(self, item_id: str):
        return self._send("DELETE", f"{self.url}/{item_id}")


class UploadAPI:
    def __init__(self, session: requests.Session, base_url: str, timeout: float = 10.0):
        self.session = session
        self.url = f"{base_url.rstrip('/')}/uploads"
        self.timeout = timeout

    def upload_image(self, data: bytes, filename: str, mime_type: str):
        """
        Send one image and get it back as a data URL.

        Args:
            data (bytes): File content.
            filename (str): Original file name.
            mime_type (str): MIME type of the file.

        Returns:
            dict: ``imageData``, ``mimeType``, ``originalName`` and ``size``.
        """
        files = {"image": (filename, data, mime_type)}
        response = self.session.post(self.url, files=files, timeout=self.timeout)
        response.raise_for_status()
        return response.json()


def build_apis(base_url: str, timeout: float = 10.0, session: requests.Session | None = None):
    """
    Create one ResourceAPI per type tag.

    Args:
        base_url (str): API root such as ``http://localhost:5000/api``.
        timeout (float): Request timeout in seconds.
        session (Session | None): Session to reuse.

    Returns:
        dict[str, ResourceAPI]: APIs keyed by ``series``, ``game`` and ``book``.
    """
    session = session or requests.Session()
    return {
        type_tag: ResourceAPI(session, base_url, resource, timeout)
        for type_tag, resource in RESOURCE_BY_TYPE.items()
    }
