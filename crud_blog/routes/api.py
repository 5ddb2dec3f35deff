# crud_blog/routes/api.py
import logging

from fastapi import APIRouter, Depends, Query, Response

from crud_blog.context import get_repository
from crud_blog.models import CommentIn, CommentOut, PostIn, PostOut, PostPage
from crud_blog.repository import PostRepository
from crud_blog.validation import COMMENT_RULES, POST_RULES, validate

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/posts", tags=["api"])


@router.get("", response_model=PostPage)
async def list_posts(
    offset: int = Query(0, ge=0),
    limit: int | None = Query(None, ge=1, le=500),
    repo: PostRepository = Depends(get_repository),
):
    posts = await repo.list(offset=offset, limit=limit)
    return PostPage(
        posts=[PostOut.model_validate(p) for p in posts],
        total=await repo.count(),
        offset=offset,
        limit=limit,
    )


@router.get("/{post_id}", response_model=PostOut)
async def get_post(post_id: int, repo: PostRepository = Depends(get_repository)):
    return await repo.find(post_id)


@router.post("", response_model=PostOut, status_code=201)
async def create_post(payload: PostIn, repo: PostRepository = Depends(get_repository)):
    fields = validate(POST_RULES, payload.model_dump())
    return await repo.create(fields)


@router.put("/{post_id}", response_model=PostOut)
async def replace_post(
    post_id: int, payload: PostIn, repo: PostRepository = Depends(get_repository)
):
    await repo.find(post_id)
    fields = validate(POST_RULES, payload.model_dump())
    return await repo.update(post_id, fields)


@router.patch("/{post_id}", response_model=PostOut)
async def patch_post(
    post_id: int, payload: PostIn, repo: PostRepository = Depends(get_repository)
):
    await repo.find(post_id)
    fields = validate(POST_RULES, payload.model_dump(exclude_unset=True), partial=True)
    return await repo.update(post_id, fields)


@router.delete("/{post_id}", status_code=204)
async def delete_post(post_id: int, repo: PostRepository = Depends(get_repository)):
    await repo.delete(post_id)
    return Response(status_code=204)


@router.get("/{post_id}/comments", response_model=list[CommentOut])
async def list_comments(post_id: int, repo: PostRepository = Depends(get_repository)):
    return await repo.comments(post_id)


@router.post("/{post_id}/comments", response_model=CommentOut, status_code=201)
async def create_comment(
    post_id: int, payload: CommentIn, repo: PostRepository = Depends(get_repository)
):
    await repo.find(post_id)
    fields = validate(COMMENT_RULES, payload.model_dump())
    return await repo.add_comment(post_id, fields)
