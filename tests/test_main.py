import pytest
from fastapi.testclient import TestClient

import posts_api.main as main_module
from posts_api.db.couchdb import DESIGN_DOC_ID
from posts_api.errors import StoreConnectionError
from posts_api.main import app
from posts_api.settings import Settings
from tests.conftest import FakeCouchDB

PREFIX = main_module.settings.API_PREFIX


def test_lifespan_connects_and_installs_design_doc(monkeypatch):
    couch = FakeCouchDB()
    monkeypatch.setattr(main_module, "get_couch", lambda settings_obj: couch)

    with TestClient(app) as client:
        assert app.state.couch_db is couch
        assert DESIGN_DOC_ID in couch.docs

        res = client.get(f"{PREFIX}/healthchecker")
        assert res.status_code == 200
        assert res.json() == {
            "status": "success",
            "message": "RESTful API in Python using FastAPI and CouchDB",
        }

    assert app.state.couch_db is None


def test_startup_fails_without_database_url(monkeypatch):
    monkeypatch.setattr(main_module, "settings", Settings(DATABASE_URL=""))

    with pytest.raises(StoreConnectionError):
        with TestClient(app):
            pass


def test_posts_routes_share_the_lifespan_handle(monkeypatch):
    couch = FakeCouchDB()
    monkeypatch.setattr(main_module, "get_couch", lambda settings_obj: couch)

    with TestClient(app) as client:
        res = client.post(
            f"{PREFIX}/posts", json={"title": "A", "body": "b", "author": "a"}
        )
        assert res.status_code == 201
        post_id = res.json()["data"]["post"]["id"]

        assert client.get(f"{PREFIX}/posts/{post_id}").status_code == 200
        assert client.get(f"{PREFIX}/posts").json()["results"] == 1
        assert client.delete(f"{PREFIX}/posts/{post_id}").status_code == 204

    assert post_id not in couch.docs
