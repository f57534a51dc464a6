import json

import pytest
import requests

from collection_api.client.api_client import ResourceAPI, UploadAPI, build_apis
from collection_api.client.project_store import ProjectStore


class FakeResourceAPI:
    """Stands in for ResourceAPI, answering like the server would."""

    def __init__(self, documents=None, fail=False):
        self.documents = list(documents or [])
        self.fail = fail
        self.calls = []
        self.counter = 0

    def _maybe_fail(self):
        if self.fail:
            raise requests.HTTPError("400 Client Error")

    def get_all(self):
        self.calls.append(("get_all",))
        self._maybe_fail()
        return list(self.documents)

    def create(self, data):
        self.calls.append(("create", data))
        self._maybe_fail()
        self.counter += 1
        return {**data, "_id": f"new{self.counter}"}

    def update(self, item_id, data):
        self.calls.append(("update", item_id, data))
        self._maybe_fail()
        return {**data, "_id": item_id}

    def delete(self, item_id):
        self.calls.append(("delete", item_id))
        self._maybe_fail()
        return {"message": "deleted"}


@pytest.fixture
def apis():
    return {
        "series": FakeResourceAPI([{"_id": "m1", "title": "Arrival"}]),
        "game": FakeResourceAPI([{"_id": "g1", "title": "Hades"}]),
        "book": FakeResourceAPI([{"_id": "b1", "title": "Dune"}, {"_id": "b2", "title": "Emma"}]),
    }


@pytest.fixture
def project_store(apis):
    store = ProjectStore(apis)
    store.load_all()
    return store


def test_load_all_fills_every_list(project_store):
    assert [item["_id"] for item in project_store.movies] == ["m1"]
    assert [item["_id"] for item in project_store.games] == ["g1"]
    assert [item["_id"] for item in project_store.books] == ["b1", "b2"]
    assert project_store.loading is False


def test_fetch_failure_keeps_list(apis):
    store = ProjectStore(apis)
    store.books = [{"_id": "old", "title": "Old"}]
    apis["book"].fail = True

    store.fetch_data("book")

    assert store.books == [{"_id": "old", "title": "Old"}]
    assert store.loading is False


def test_add_project_prepends(project_store, apis):
    created = project_store.add_project({"title": "Neuromancer", "genre": "Sci-Fi", "status": "planned"}, "book")

    assert created["_id"] == "new1"
    assert [item["_id"] for item in project_store.books] == ["new1", "b1", "b2"]
    assert apis["book"].calls[-1][0] == "create"


def test_add_project_failure_propagates(project_store, apis):
    apis["game"].fail = True

    with pytest.raises(requests.HTTPError):
        project_store.add_project({"title": ""}, "game")

    assert [item["_id"] for item in project_store.games] == ["g1"]
    assert project_store.loading is False


def test_update_project_replaces_in_place(project_store):
    updated = project_store.update_project("b1", {"title": "Dune", "status": "completed"}, "book")

    assert updated == {"title": "Dune", "status": "completed", "_id": "b1"}
    assert project_store.books[0] == updated
    assert project_store.books[1]["_id"] == "b2"


def test_update_failure_propagates(project_store, apis):
    apis["book"].fail = True

    with pytest.raises(requests.HTTPError):
        project_store.update_project("b1", {"title": "Dune"}, "book")

    assert project_store.books[0] == {"_id": "b1", "title": "Dune"}


def test_delete_project_removes_entry(project_store):
    project_store.delete_project("b1", "book")

    assert [item["_id"] for item in project_store.books] == ["b2"]


def test_delete_failure_propagates(project_store, apis):
    apis["series"].fail = True

    with pytest.raises(requests.HTTPError):
        project_store.delete_project("m1", "series")

    assert len(project_store.movies) == 1


def test_unknown_type_falls_back_to_movies(project_store, apis):
    project_store.add_project({"title": "Alien"}, "podcast")

    assert project_store.movies[0]["title"] == "Alien"
    assert apis["series"].calls[-1][0] == "create"


def test_duplicate_title_ignores_case_and_spaces(project_store):
    assert project_store.is_duplicate_title("  dune ", "book")
    assert project_store.is_duplicate_title("DUNE", "book")
    assert not project_store.is_duplicate_title("Dune", "game")
    assert not project_store.is_duplicate_title("Dune Messiah", "book")


def test_build_apis_targets_each_resource():
    apis = build_apis("http://localhost:5000/api/", timeout=3)

    assert apis["series"].url == "http://localhost:5000/api/movies"
    assert apis["game"].url == "http://localhost:5000/api/games"
    assert apis["book"].url == "http://localhost:5000/api/books"
    assert apis["book"].timeout == 3


class FlaskSession:
    """Routes requests made by ResourceAPI to a Flask test client."""

    def __init__(self, test_client):
        self.test_client = test_client

    def request(self, method, url, timeout=None, **kwargs):
        path = url.replace("http://testserver", "")
        flask_response = self.test_client.open(path, method=method, **kwargs)
        response = requests.Response()
        response.status_code = flask_response.status_code
        response._content = flask_response.data
        response.url = url
        return response


def test_store_against_the_api(client):
    session = FlaskSession(client)
    apis = {
        type_tag: ResourceAPI(session, "http://testserver/api", resource)
        for type_tag, resource in (("series", "movies"), ("game", "games"), ("book", "books"))
    }
    store = ProjectStore(apis)
    store.load_all()

    created = store.add_project({"title": "Dune", "genre": "Sci-Fi", "status": "planned"}, "book")
    store.update_project(created["_id"], {"title": "Dune", "genre": "Sci-Fi", "status": "completed", "rating": 5}, "book")

    assert store.books[0]["status"] == "completed"
    assert store.is_duplicate_title(" dune", "book")

    with pytest.raises(requests.HTTPError):
        store.add_project({"title": "", "genre": "Sci-Fi", "status": "planned"}, "book")

    store.delete_project(created["_id"], "book")

    assert store.books == []
    assert client.get("/api/books").get_json() == []


class RecordingSession:
    def __init__(self, payload):
        self.payload = payload
        self.posts = []

    def post(self, url, files=None, timeout=None):
        self.posts.append((url, files, timeout))
        response = requests.Response()
        response.status_code = 200
        response._content = json.dumps(self.payload).encode()
        return response


def test_upload_api_sends_image_field():
    session = RecordingSession({"imageData": "data:image/png;base64,eA==", "size": 1})
    upload_api = UploadAPI(session, "http://localhost:5000/api", timeout=5)

    result = upload_api.upload_image(b"x", "cover.png", "image/png")

    assert result["size"] == 1
    assert session.posts == [("http://localhost:5000/api/uploads", {"image": ("cover.png", b"x", "image/png")}, 5)]
