import datetime
import logging
import re
from contextlib import contextmanager
from typing import Optional

from pydantic import ValidationError

from posts_api.errors import (
    STORE_ERRORS,
    DuplicateKeyError,
    InvalidIdError,
    NotFoundError,
    QueryError,
    SerializationError,
    is_duplicate_key_error,
)
from posts_api.repos.posts_repo import POST_TYPE
from posts_api.schemas.post import (
    CreatePostSchema,
    PostData,
    PostListResponse,
    PostResponse,
    SinglePostResponse,
    UpdatePostSchema,
)

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100

# CouchDB generates uuid4 hex ids
_POST_ID_RE = re.compile(r"[0-9a-fA-F]{32}")


class PostsService:
    """
    Post operations on top of CouchPostsRepo.

    Translates between wire schemas, stored documents and response envelopes,
    and turns store failures into the PostsError family.
    """

    def __init__(self, repo):
        self.repo = repo

    def list_posts(
        self, limit: int = DEFAULT_PAGE_SIZE, page: int = 1
    ) -> PostListResponse:
        limit = min(max(limit, 1), MAX_PAGE_SIZE)
        page = max(page, 1)

        with _store_errors("list posts"):
            docs = self.repo.list_post_docs(limit=limit, skip=(page - 1) * limit)

        posts = [doc_to_post(doc) for doc in docs]
        return PostListResponse(results=len(posts), posts=posts)

    def create_post(self, body: CreatePostSchema) -> SinglePostResponse:
        now = _timestamp()
        document = {
            **body.model_dump(exclude_none=True),
            "type": POST_TYPE,
            "published": body.published if body.published is not None else False,
            "createdAt": now,
            "updatedAt": now,
        }

        self._claim_title(body.title)
        try:
            with _store_errors("create post"):
                saved = self.repo.save_post_doc(document)
        except Exception:
            self._release_title(body.title)
            raise

        post_id = saved["_id"]
        with _store_errors(f"fetch post {post_id}"):
            doc = self.repo.get_post_doc(post_id)
        if doc is None:
            raise NotFoundError(post_id)

        logger.info(f"Created post {post_id} ('{body.title}')")
        return _single(doc)

    def get_post(self, post_id: str) -> SinglePostResponse:
        post_id = parse_post_id(post_id)
        with _store_errors(f"fetch post {post_id}"):
            doc = self.repo.get_post_doc(post_id)
        if doc is None:
            raise NotFoundError(post_id)
        return _single(doc)

    def edit_post(self, post_id: str, body: UpdatePostSchema) -> SinglePostResponse:
        post_id = parse_post_id(post_id)
        with _store_errors(f"fetch post {post_id}"):
            doc = self.repo.get_post_doc(post_id)
        if doc is None:
            raise NotFoundError(post_id)

        changes = body.model_dump(exclude_none=True)
        if not changes:
            return _single(doc)

        old_title = doc.get("title")
        new_title = changes.get("title")
        title_changed = new_title is not None and new_title != old_title
        if title_changed:
            self._claim_title(new_title)

        updated = {
            **doc,
            **changes,
            "updatedAt": max(_timestamp(), doc.get("updatedAt") or ""),
        }
        try:
            with _store_errors(f"edit post {post_id}"):
                saved = self.repo.save_post_doc(updated)
        except Exception:
            if title_changed:
                self._release_title(new_title)
            raise

        if title_changed and old_title is not None:
            self._release_title(old_title)
        return _single(saved)

    def delete_post(self, post_id: str) -> None:
        post_id = parse_post_id(post_id)
        with _store_errors(f"fetch post {post_id}"):
            doc = self.repo.get_post_doc(post_id)
        if doc is None:
            raise NotFoundError(post_id)

        with _store_errors(f"delete post {post_id}"):
            deleted = self.repo.delete_post_doc(doc)
        if not deleted:
            raise NotFoundError(post_id)

        if doc.get("title") is not None:
            self._release_title(doc["title"])
        logger.info(f"Deleted post {post_id}")

    def _claim_title(self, title: str) -> None:
        try:
            self.repo.claim_title(title)
        except STORE_ERRORS as e:
            if is_duplicate_key_error(e):
                raise DuplicateKeyError(title) from e
            logger.error(f"Failed to claim title '{title}': {e}")
            raise QueryError(f"Failed to claim title '{title}': {e}") from e

    def _release_title(self, title: str) -> None:
        try:
            released = self.repo.release_title(title)
        except STORE_ERRORS as e:
            logger.warning(f"Could not release title claim for '{title}': {e}")
            return
        if not released:
            logger.warning(f"No title claim found for '{title}'")


def parse_post_id(post_id: Optional[str]) -> str:
    if not post_id or not _POST_ID_RE.fullmatch(post_id):
        raise InvalidIdError(str(post_id))
    return post_id.lower()


def doc_to_post(doc: dict) -> PostResponse:
    """Render a stored post; a missing `published` reads as False."""
    try:
        return PostResponse(
            id=doc["_id"],
            title=doc.get("title"),
            body=doc.get("body"),
            author=doc.get("author"),
            published=doc.get("published", False),
            createdAt=doc.get("createdAt"),
            updatedAt=doc.get("updatedAt"),
        )
    except (KeyError, ValidationError) as e:
        logger.error(f"Cannot render stored post {doc.get('_id')}: {e}")
        raise SerializationError(f"Cannot render stored post {doc.get('_id')}") from e


def _single(doc: dict) -> SinglePostResponse:
    return SinglePostResponse(data=PostData(post=doc_to_post(doc)))


def _timestamp() -> str:
    # fixed precision keeps stored stamps comparable as strings
    return datetime.datetime.now(datetime.timezone.utc).isoformat(
        timespec="microseconds"
    )


@contextmanager
def _store_errors(action: str):
    try:
        yield
    except STORE_ERRORS as e:
        logger.error(f"Failed to {action}: {e}")
        raise QueryError(f"Failed to {action}: {e}") from e
