import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from posts_api.db.couchdb import ensure_indexes, get_couch
from posts_api.routers import health, posts
from posts_api.settings import settings

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper()),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Posts API", description="CRUD for blog posts on CouchDB")


@asynccontextmanager
async def lifespan(app: FastAPI):
    # StoreConnectionError propagates and aborts startup
    couch_db = get_couch(settings)
    ensure_indexes(couch_db)
    app.state.couch_db = couch_db
    logger.info(f"Database connected at {settings.redacted_database_url}")

    try:
        yield
    finally:
        app.state.couch_db = None
        logger.info("Posts API shut down")


app.router.lifespan_context = lifespan

app.include_router(health.router, prefix=settings.API_PREFIX)
app.include_router(posts.router, prefix=settings.API_PREFIX)
