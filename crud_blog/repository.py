# crud_blog/repository.py
import logging
from datetime import timedelta
from typing import Any, Mapping, Sequence

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from crud_blog.errors import NotFound, NotPersisted
from crud_blog.perf import time_async_function
from crud_blog.store import Comment, Post, utcnow

logger = logging.getLogger(__name__)

# largest value a 64-bit signed INTEGER column can hold
MAX_ROW_ID = 2**63 - 1


def only_fillable(fields: Mapping[str, Any], fillable: Sequence[str]) -> dict[str, Any]:
    """Drops every key outside the allow-list. Unknown keys are ignored, not errors."""
    return {key: value for key, value in fields.items() if key in fillable}


class PostRepository:
    """
    Create/read/update/delete for posts over one AsyncSession.

    Writes commit on success and roll back on any store error, so a failed
    create or update never leaves a partial row behind.
    """

    fillable: tuple[str, ...] = ("title", "body")
    comment_fillable: tuple[str, ...] = ("body",)

    def __init__(self, session: AsyncSession):
        self.session = session

    async def _commit(self, action: str) -> None:
        try:
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(f"Could not {action}: {e}")
            raise NotPersisted(f"Could not {action}.") from e

    @time_async_function
    async def create(self, fields: Mapping[str, Any]) -> Post:
        values = only_fillable(fields, self.fillable)
        now = utcnow()
        post = Post(**values, created_at=now, updated_at=now, comments=[])
        self.session.add(post)
        await self._commit("create post")
        logger.info(f"Created post {post.id}")
        return post

    async def find(self, post_id: int) -> Post:
        if not 1 <= post_id <= MAX_ROW_ID:
            raise NotFound("Post", post_id)
        post = await self.session.get(Post, post_id)
        if post is None:
            raise NotFound("Post", post_id)
        return post

    async def count(self) -> int:
        result = await self.session.execute(select(func.count()).select_from(Post))
        return result.scalar_one()

    @time_async_function
    async def update(self, post_id: int, fields: Mapping[str, Any]) -> Post:
        post = await self.find(post_id)
        previous = post.updated_at

        for key, value in only_fillable(fields, self.fillable).items():
            setattr(post, key, value)

        # updated_at must move forward even when the clock has not ticked
        now = utcnow()
        if previous is not None and now <= previous:
            now = previous + timedelta(microseconds=1)
        post.updated_at = now

        await self._commit(f"update post {post_id}")
        logger.info(f"Updated post {post_id}")
        return post

    @time_async_function
    async def delete(self, post_id: int) -> None:
        post = await self.find(post_id)
        await self.session.delete(post)
        await self._commit(f"delete post {post_id}")
        logger.info(f"Deleted post {post_id}")

    async def add_comment(self, post_id: int, fields: Mapping[str, Any]) -> Comment:
        post = await self.find(post_id)
        comment = Comment(
            **only_fillable(fields, self.comment_fillable), created_at=utcnow()
        )
        post.comments.append(comment)
        await self._commit(f"add comment to post {post_id}")
        logger.info(f"Added comment {comment.id} to post {post_id}")
        return comment

    async def comments(self, post_id: int) -> Sequence[Comment]:
        await self.find(post_id)
        result = await self.session.execute(
            select(Comment).where(Comment.post_id == post_id).order_by(Comment.id)
        )
        return result.scalars().all()

    async def list(self, offset: int = 0, limit: int | None = None) -> Sequence[Post]:
        """All posts in insertion order (ascending id)."""
        if offset > MAX_ROW_ID:
            return []
        stmt = select(Post).order_by(Post.id).offset(offset)
        if limit is not None:
            stmt = stmt.limit(limit)
        result = await self.session.execute(stmt)
        return result.scalars().all()
