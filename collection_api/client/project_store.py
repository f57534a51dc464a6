import logging

from collection_api.config import Settings
from collection_api.client.api_client import DEFAULT_TYPE, RESOURCE_BY_TYPE, ResourceAPI, build_apis
from collection_api.client.project_functions import is_duplicate_title


logger = logging.getLogger(__name__)


class ProjectStore:
    """
    In-memory copy of the three collections, kept in step with the API.

    Lists are loaded with ``load_all`` and then updated from the responses of
    each mutation instead of being fetched again.
    """

    def __init__(self, apis: dict[str, ResourceAPI]):
        self.apis = apis
        self.movies: list[dict] = []
        self.games: list[dict] = []
        self.books: list[dict] = []
        self.loading = False

    @classmethod
    def from_settings(cls, settings: Settings):
        return cls(build_apis(settings.api_base_url, settings.api_timeout))

    def resolve_type(self, type_tag: str):
        return type_tag if type_tag in RESOURCE_BY_TYPE else DEFAULT_TYPE

    def get_api(self, type_tag: str):
        return self.apis[self.resolve_type(type_tag)]

    def get_projects_by_type(self, type_tag: str):
        resolved = self.resolve_type(type_tag)
        if resolved == "game":
            return self.games
        if resolved == "book":
            return self.books
        return self.movies

    def set_projects(self, type_tag: str, projects: list[dict]):
        resolved = self.resolve_type(type_tag)
        if resolved == "game":
            self.games = projects
        elif resolved == "book":
            self.books = projects
        else:
            self.movies = projects

    def fetch_data(self, type_tag: str):
        """
        Replace one list with the server's current content.

        Failures are logged and leave the list as it was.

        Args:
            type_tag (str): ``series``, ``game`` or ``book``.
        """
        self.loading = True
        try:
            self.set_projects(type_tag, list(self.get_api(type_tag).get_all()))
        except Exception:
            logger.exception("Error fetching %s", type_tag)
        finally:
            self.loading = False

    def load_all(self):
        for type_tag in RESOURCE_BY_TYPE:
            self.fetch_data(type_tag)

    def add_project(self, project: dict, type_tag: str):
        """
        Create an item and put it at the front of its list.

        Args:
            project (dict): Entity fields.
            type_tag (str): ``series``, ``game`` or ``book``.

        Returns:
            dict: Document returned by the server.
        """
        self.loading = True
        try:
            created = self.get_api(type_tag).create(project)
            self.set_projects(type_tag, [created, *self.get_projects_by_type(type_tag)])
            return created
        except Exception:
            logger.exception("Error adding %s", type_tag)
            raise
        finally:
            self.loading = False

    def update_project(self, project_id: str, project: dict, type_tag: str):
        """
        Update an item and swap it in place in its list.

        Args:
            project_id (str): Identifier of the item.
            project (dict): Entity fields.
            type_tag (str): ``series``, ``game`` or ``book``.

        Returns:
            dict: Document returned by the server.
        """
        self.loading = True
        try:
            updated = self.get_api(type_tag).update(project_id, project)
            projects = [
                updated if existing.get("_id") == project_id else existing
                for existing in self.get_projects_by_type(type_tag)
            ]
            self.set_projects(type_tag, projects)
            return updated
        except Exception:
            logger.exception("Error updating %s", type_tag)
            raise
        finally:
            self.loading = False

    def delete_project(self, project_id: str, type_tag: str):
        try:
            self.get_api(type_tag).delete(project_id)
            projects = [existing for existing in self.get_projects_by_type(type_tag) if existing.get("_id") != project_id]
            self.set_projects(type_tag, projects)
        except Exception:
            logger.exception("Error deleting %s", type_tag)
            raise

    def is_duplicate_title(self, title: str, type_tag: str):
        return is_duplicate_title(self.get_projects_by_type(type_tag), title)
