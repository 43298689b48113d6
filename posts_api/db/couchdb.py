import logging

import pycouchdb

from posts_api.errors import STORE_ERRORS, StoreConnectionError
from posts_api.settings import Settings, settings

logger = logging.getLogger(__name__)

DESIGN_DOC_ID = "_design/posts"
ALL_POSTS_VIEW = "posts/all"

POSTS_DESIGN_DOC = {
    "_id": DESIGN_DOC_ID,
    "language": "javascript",
    "views": {
        "all": {
            "map": "function (doc) { if (doc.type === 'post') { emit(doc._id, null); } }"
        }
    },
}


def initialize(database_url: str, database_name: str):
    """
    Open the CouchDB database, creating it on first use.
    Raises StoreConnectionError when the server cannot be reached.
    """
    if not database_url:
        raise StoreConnectionError("DATABASE_URL must be set")

    try:
        server = pycouchdb.Server(database_url)
        info = server.info()
        try:
            database = server.database(database_name)
        except pycouchdb.exceptions.NotFound:
            logger.info(f"Creating CouchDB database '{database_name}'")
            database = server.create(database_name)
    except STORE_ERRORS as e:
        raise StoreConnectionError(f"Cannot connect to CouchDB: {e}") from e

    logger.info(
        f"Connected to CouchDB {info.get('version', '?')}, database '{database_name}'"
    )
    return database


def get_couch(settings_obj: Settings = settings):
    """
    Create the CouchDB database handle.
    Called at runtime to avoid import-time connections.
    """
    return initialize(settings_obj.DATABASE_URL, settings_obj.COUCHDB_DATABASE)


def ensure_indexes(database) -> None:
    """Install the posts design document once; safe to call repeatedly."""
    try:
        try:
            database.get(DESIGN_DOC_ID)
            logger.debug(f"{DESIGN_DOC_ID} already present")
            return
        except pycouchdb.exceptions.NotFound:
            pass

        try:
            database.save(dict(POSTS_DESIGN_DOC))
            logger.info(f"Created {DESIGN_DOC_ID}")
        except pycouchdb.exceptions.Conflict:
            # another worker created it in between
            logger.debug(f"{DESIGN_DOC_ID} created concurrently")
    except STORE_ERRORS as e:
        raise StoreConnectionError(f"Cannot install {DESIGN_DOC_ID}: {e}") from e
