import logging

from fastapi import APIRouter, Depends, Query, Response
from fastapi.responses import JSONResponse

from posts_api import dependencies as deps
from posts_api.errors import (
    DuplicateKeyError,
    InvalidIdError,
    NotFoundError,
    PostsError,
    QueryError,
    SerializationError,
)
from posts_api.schemas.post import (
    CreatePostSchema,
    PostListResponse,
    SinglePostResponse,
    UpdatePostSchema,
)
from posts_api.services.posts_service import (
    DEFAULT_PAGE_SIZE,
    MAX_PAGE_SIZE,
    PostsService,
)

logger = logging.getLogger(__name__)

router = APIRouter()

ERROR_STATUS_CODES = {
    InvalidIdError: 400,
    NotFoundError: 404,
    DuplicateKeyError: 409,
    QueryError: 500,
    SerializationError: 500,
}

# store error text stays in the logs
REDACTED_MESSAGE = "Database error"


def fail(error: PostsError) -> JSONResponse:
    status_code = ERROR_STATUS_CODES.get(type(error), 500)
    message = error.message if status_code < 500 else REDACTED_MESSAGE
    return fail_response(status_code, message)


def fail_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code, content={"status": "fail", "message": message}
    )


@router.get("/posts", response_model=PostListResponse)
def list_posts(
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    page: int = Query(1, description="1-indexed; values below 1 read as 1"),
    service: PostsService = Depends(deps.get_posts_service),
):
    """List posts, `limit` per page."""
    try:
        return service.list_posts(limit=limit, page=page)
    except PostsError as e:
        return fail(e)
    except Exception as e:
        logger.error(f"Unexpected error listing posts: {e}")
        return fail_response(500, "Failed to retrieve posts")


@router.post("/posts", status_code=201, response_model=SinglePostResponse)
def create_post(
    body: CreatePostSchema,
    service: PostsService = Depends(deps.get_posts_service),
):
    try:
        return service.create_post(body)
    except PostsError as e:
        return fail(e)
    except Exception as e:
        logger.error(f"Unexpected error creating post: {e}")
        return fail_response(500, "Failed to create post")


@router.get("/posts/{post_id}", response_model=SinglePostResponse)
def get_post(
    post_id: str,
    service: PostsService = Depends(deps.get_posts_service),
):
    try:
        return service.get_post(post_id)
    except PostsError as e:
        return fail(e)
    except Exception as e:
        logger.error(f"Unexpected error retrieving post {post_id}: {e}")
        return fail_response(500, "Failed to retrieve post")


@router.patch("/posts/{post_id}", response_model=SinglePostResponse)
def edit_post(
    post_id: str,
    body: UpdatePostSchema,
    service: PostsService = Depends(deps.get_posts_service),
):
    """Partial update: only fields present in the body change."""
    try:
        return service.edit_post(post_id, body)
    except PostsError as e:
        return fail(e)
    except Exception as e:
        logger.error(f"Unexpected error editing post {post_id}: {e}")
        return fail_response(500, "Failed to update post")


@router.delete("/posts/{post_id}", status_code=204)
def delete_post(
    post_id: str,
    service: PostsService = Depends(deps.get_posts_service),
):
    try:
        service.delete_post(post_id)
    except PostsError as e:
        return fail(e)
    except Exception as e:
        logger.error(f"Unexpected error deleting post {post_id}: {e}")
        return fail_response(500, "Failed to delete post")
    return Response(status_code=204)
