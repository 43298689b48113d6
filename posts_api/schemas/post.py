from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict


class CreatePostSchema(BaseModel):
    model_config = ConfigDict(extra="forbid", strict=True)

    title: str
    body: str
    author: str
    published: Optional[bool] = None


class UpdatePostSchema(BaseModel):
    model_config = ConfigDict(extra="forbid", strict=True)

    title: Optional[str] = None
    body: Optional[str] = None
    author: Optional[str] = None
    published: Optional[bool] = None


class PostResponse(BaseModel):
    id: str
    title: str
    body: str
    author: str
    published: bool = False
    createdAt: datetime
    updatedAt: datetime


class PostData(BaseModel):
    post: PostResponse


class SinglePostResponse(BaseModel):
    status: str = "success"
    data: PostData


class PostListResponse(BaseModel):
    status: str = "success"
    results: int
    posts: List[PostResponse] = Field(default_factory=list)


class GenericResponse(BaseModel):
    status: str
    message: str
