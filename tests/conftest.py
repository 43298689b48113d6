import copy
import itertools
import uuid

import pycouchdb
import pytest

from posts_api.repos.posts_repo import CouchPostsRepo
from posts_api.services.posts_service import PostsService


class FakeCouchDB:
    """
    Minimal in-memory CouchDB stand-in.
    Set track_calls=True to record every call in order.
    """

    def __init__(self, docs: dict | None = None, track_calls: bool = False):
        self.docs = docs if docs is not None else {}
        self.track_calls = track_calls
        self.calls = []
        self._revs = itertools.count(1)

    def _track(self, call: str):
        if self.track_calls:
            self.calls.append(call)

    def get(self, doc_id: str) -> dict:
        self._track(f"get({doc_id})")
        if doc_id not in self.docs:
            raise pycouchdb.exceptions.NotFound(doc_id)
        return copy.deepcopy(self.docs[doc_id])

    def save(self, doc: dict) -> dict:
        doc = copy.deepcopy(doc)
        doc_id = doc.setdefault("_id", uuid.uuid4().hex)
        self._track(f"save({doc_id})")
        current = self.docs.get(doc_id)
        if current is not None and current.get("_rev") != doc.get("_rev"):
            raise pycouchdb.exceptions.Conflict("Document update conflict.")
        doc["_rev"] = f"{next(self._revs)}-fake"
        self.docs[doc_id] = doc
        return copy.deepcopy(doc)

    def delete(self, doc_or_id):
        doc_id = doc_or_id["_id"] if isinstance(doc_or_id, dict) else doc_or_id
        self._track(f"delete({doc_id})")
        if doc_id not in self.docs:
            raise pycouchdb.exceptions.NotFound(doc_id)
        del self.docs[doc_id]

    def query(self, name, include_docs=False, limit=None, skip=0, as_list=False):
        self._track(f"query({name}, limit={limit}, skip={skip})")
        posts = sorted(
            (doc for doc in self.docs.values() if doc.get("type") == "post"),
            key=lambda doc: doc["_id"],
        )
        rows = []
        for doc in posts[skip:]:
            row = {"id": doc["_id"], "key": doc["_id"], "value": None}
            if include_docs:
                row["doc"] = copy.deepcopy(doc)
            rows.append(row)
        return rows[:limit] if limit is not None else rows


class FakePostsService:
    """
    Posts service stand-in for router tests; raises `error` from every call.
    """

    def __init__(self, error: Exception):
        self.error = error

    def list_posts(self, limit=10, page=1):
        raise self.error

    def create_post(self, body):
        raise self.error

    def get_post(self, post_id):
        raise self.error

    def edit_post(self, post_id, body):
        raise self.error

    def delete_post(self, post_id):
        raise self.error


def make_post_doc(post_id: str, title: str, **overrides) -> dict:
    doc = {
        "_id": post_id,
        "_rev": "1-seed",
        "type": "post",
        "title": title,
        "body": f"{title} body",
        "author": "ted",
        "published": False,
        "createdAt": "2024-01-01T00:00:00.000000+00:00",
        "updatedAt": "2024-01-01T00:00:00.000000+00:00",
    }
    doc.update(overrides)
    return doc


@pytest.fixture
def couch():
    return FakeCouchDB(track_calls=True)


@pytest.fixture
def service(couch):
    return PostsService(CouchPostsRepo(couch))
