from fastapi import Depends, Request

from posts_api.repos.posts_repo import CouchPostsRepo
from posts_api.services.posts_service import PostsService


def get_couch(request: Request):
    """The database handle opened once by the app lifespan."""
    return request.app.state.couch_db


def get_posts_repo(couch_db=Depends(get_couch)):
    return CouchPostsRepo(couch_db)


def get_posts_service(repo=Depends(get_posts_repo)):
    return PostsService(repo=repo)
