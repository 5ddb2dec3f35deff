# --- Pydantic Models ---
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict


class PostIn(BaseModel):
    # field rules live in crud_blog.validation
    title: Any = None
    body: Any = None


class CommentIn(BaseModel):
    body: Any = None


class CommentOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    post_id: int
    body: str
    created_at: datetime


class PostOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    body: str
    created_at: datetime
    updated_at: datetime


class PostPage(BaseModel):
    posts: list[PostOut]
    total: int
    offset: int
    limit: int | None
