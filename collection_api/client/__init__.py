from collection_api.client.api_client import ResourceAPI, UploadAPI, build_apis
from collection_api.client.project_store import ProjectStore

__all__ = ["ProjectStore", "ResourceAPI", "UploadAPI", "build_apis"]
