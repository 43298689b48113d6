import hashlib
from typing import List, Optional

import pycouchdb

from posts_api.db.couchdb import ALL_POSTS_VIEW

POST_TYPE = "post"
TITLE_CLAIM_TYPE = "title_claim"


def title_claim_id(title: str) -> str:
    digest = hashlib.sha256(title.encode("utf-8")).hexdigest()
    return f"title:{digest}"


class CouchPostsRepo:
    """
    Raw CouchDB access for posts.
    Store errors propagate unchanged; callers decide what they mean.
    """

    def __init__(self, couch_db):
        self.db = couch_db

    def list_post_docs(self, limit: int, skip: int) -> List[dict]:
        rows = self.db.query(
            ALL_POSTS_VIEW, include_docs=True, limit=limit, skip=skip, as_list=True
        )
        return [row["doc"] for row in rows if row.get("doc")]

    def get_post_doc(self, post_id: str) -> Optional[dict]:
        try:
            doc = self.db.get(post_id)
        except pycouchdb.exceptions.NotFound:
            return None
        return doc if self._is_post(doc) else None

    def save_post_doc(self, doc: dict) -> dict:
        """Insert or update; returns the stored document with its new _rev."""
        return self.db.save(doc)

    def delete_post_doc(self, doc: dict) -> bool:
        try:
            self.db.delete(doc)
        except pycouchdb.exceptions.NotFound:
            return False
        return True

    def claim_title(self, title: str) -> None:
        # raises pycouchdb.exceptions.Conflict when the title is taken
        self.db.save(
            {"_id": title_claim_id(title), "type": TITLE_CLAIM_TYPE, "title": title}
        )

    def release_title(self, title: str) -> bool:
        try:
            claim = self.db.get(title_claim_id(title))
            self.db.delete(claim)
        except pycouchdb.exceptions.NotFound:
            return False
        return True

    @staticmethod
    def _is_post(doc: dict | None) -> bool:
        return bool(doc) and doc.get("type") == POST_TYPE
