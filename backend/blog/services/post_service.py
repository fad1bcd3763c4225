"""
Blog Backend — Post Service
=============================

What:  CRUD for posts, with the validation shared by create and update.
Why:   Keeps persistence rules out of the route handlers; the handlers only
       decide between render and redirect.
Who:   Called by the post routes.

Validation policy (create and update):
    title and content must be non-blank strings; title fits in 255 chars.
    Validation runs BEFORE the ORM object is touched, so a rejected update
    leaves the loaded Post clean. The request's transaction commits whatever
    is dirty.
"""

import logging
from typing import Dict, List, Optional, Union

from sqlalchemy import desc, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from blog.exceptions import DatabaseError, ValidationFailedError
from blog.models.post import TITLE_MAX_LENGTH, Post
from blog.models.user import User
from blog.schemas.post import PostInput

logger = logging.getLogger(__name__)

# Largest value a PostgreSQL `integer` column can hold
MAX_ID = 2**31 - 1


def parse_id(raw: Union[str, int]) -> Optional[int]:
    """
    Turns a path segment into a primary key, or None if it can't be one.

    "abc", "-1" and ids past the integer column's range are all simply "no
    such post" rather than a query error.
    """
    if isinstance(raw, int):
        value = raw
    elif isinstance(raw, str) and raw.isascii() and raw.isdigit():
        value = int(raw)
    else:
        return None
    if value < 1 or value > MAX_ID:
        return None
    return value


class PostService:
    """
    Business logic layer for post operations.

    Error Handling Strategy:
        Invalid input → ValidationFailedError (nothing written).
        SQLAlchemy failures → DatabaseError (details logged, not exposed).
    """

    def validate(self, form: PostInput) -> Dict[str, List[str]]:
        """Returns field → messages; empty when the form can be saved."""
        errors: Dict[str, List[str]] = {}
        if not form.title.strip():
            errors.setdefault("title", []).append("Title can't be blank")
        elif len(form.title) > TITLE_MAX_LENGTH:
            errors.setdefault("title", []).append(
                f"Title is too long (maximum is {TITLE_MAX_LENGTH} characters)"
            )
        if not form.content.strip():
            errors.setdefault("content", []).append("Content can't be blank")
        return errors

    def _ensure_valid(self, form: PostInput) -> None:
        errors = self.validate(form)
        if errors:
            raise ValidationFailedError(errors)

    async def list_posts(self, db: AsyncSession) -> List[Post]:
        """All posts, newest first."""
        try:
            result = await db.execute(
                select(Post).order_by(desc(Post.created_at), desc(Post.id))
            )
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error("Database error listing posts: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve posts. Please try again.",
                context={"error_type": type(e).__name__},
            )

    async def find_post(self, db: AsyncSession, raw_id: Union[str, int]) -> Optional[Post]:
        post_id = parse_id(raw_id)
        if post_id is None:
            return None
        try:
            return await db.get(Post, post_id)
        except SQLAlchemyError as e:
            logger.error("Database error fetching post %s: %s", post_id, str(e))
            raise DatabaseError(
                message="Could not retrieve the post. Please try again.",
                context={"post_id": post_id},
            )

    async def create_post(self, db: AsyncSession, author: User, form: PostInput) -> Post:
        """
        Saves a new post owned by `author`.

        Raises:
            ValidationFailedError: blank title/content; no row is inserted
            DatabaseError: insert failed
        """
        self._ensure_valid(form)

        # author_id rather than author=: assigning the relationship would
        # append to author.posts, which is never loaded (lazy="raise_on_sql")
        post = Post(title=form.title, content=form.content, author_id=author.id)
        db.add(post)
        try:
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error creating post: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not save the post. Please try again.",
                context={"author_id": author.id},
            )
        logger.info("Post %s created by user %s", post.id, author.id)
        return post

    async def update_post(self, db: AsyncSession, post: Post, form: PostInput) -> Post:
        """
        Applies new title/content to `post`.

        Only title, content and updated_at change; id and author_id are not
        part of PostInput and are never touched here.
        """
        self._ensure_valid(form)

        post.title = form.title
        post.content = form.content
        try:
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error updating post %s: %s", post.id, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not update the post. Please try again.",
                context={"post_id": post.id},
            )
        logger.info("Post %s updated", post.id)
        return post

    async def delete_post(self, db: AsyncSession, post: Post) -> None:
        post_id = post.id
        try:
            await db.delete(post)
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error deleting post %s: %s", post_id, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not delete the post. Please try again.",
                context={"post_id": post_id},
            )
        logger.info("Post %s deleted", post_id)


# ── Singleton Instance ────────────────────────────────────────────────────
post_service = PostService()
