import pycouchdb
import requests


class PostsError(Exception):
    """Base class for failures surfaced by the posts data layer."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class StoreConnectionError(PostsError):
    pass


class InvalidIdError(PostsError):
    def __init__(self, post_id: str):
        super().__init__(f"Invalid ID: {post_id}")
        self.post_id = post_id


class NotFoundError(PostsError):
    def __init__(self, post_id: str):
        super().__init__(f"Post with ID: {post_id} not found")
        self.post_id = post_id


class DuplicateKeyError(PostsError):
    def __init__(self, title: str):
        super().__init__(f"Post with title: '{title}' already exists")
        self.title = title


class QueryError(PostsError):
    pass


class SerializationError(PostsError):
    pass


def is_duplicate_key_error(exc: Exception) -> bool:
    """CouchDB answers a PUT on an existing _id with 409, raised as Conflict."""
    return isinstance(exc, pycouchdb.exceptions.Conflict)


# Everything the CouchDB client can raise for a failed call: API errors
# (4xx/5xx answers) and transport errors from the underlying requests session.
STORE_ERRORS = (pycouchdb.exceptions.Error, requests.exceptions.RequestException)
