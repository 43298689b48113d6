from fastapi import APIRouter

from posts_api.schemas.post import GenericResponse

router = APIRouter()

MESSAGE = "RESTful API in Python using FastAPI and CouchDB"


@router.get("/healthchecker", response_model=GenericResponse)
def health_checker():
    return GenericResponse(status="success", message=MESSAGE)
