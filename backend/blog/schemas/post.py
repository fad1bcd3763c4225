"""
Blog Backend — Post Input and View Schemas
============================================

What:  Pydantic models for what a post form submits and what a post page shows.
Why:   Form fields are bound to an explicit input struct (one field per
       column the user may set) instead of being mass-assigned onto the ORM
       object. `author_id`, `id` and the timestamps are simply not fields
       here, so no request can set them.
How:   Routes receive `PostInput` through `Depends(PostInput.as_form)`;
       views are built from ORM rows with `from_attributes`.
"""

from datetime import datetime
from typing import Optional

from fastapi import Form
from pydantic import BaseModel, Field

from blog.models.post import Post


# ══════════════════════════════════════════════════════════════════════════
# Input: what the new/edit forms submit
# ══════════════════════════════════════════════════════════════════════════


class PostInput(BaseModel):
    """
    Submitted title/content for create and update.

    Both default to "" so a missing field reaches PostService validation
    (and comes back as "can't be blank") instead of failing request parsing.
    """
    title: str = Field(default="", description="Post title")
    content: str = Field(default="", description="Post body")

    @classmethod
    def as_form(
        cls,
        title: str = Form(default=""),
        content: str = Form(default=""),
    ) -> "PostInput":
        return cls(title=title, content=content)


# ══════════════════════════════════════════════════════════════════════════
# Views: what rendered pages receive as locals
# ══════════════════════════════════════════════════════════════════════════


class PostForm(BaseModel):
    """
    Values shown in the new/edit form.

    On a failed save this carries the rejected values, so the user gets
    their input back alongside the errors.
    """
    id: Optional[int] = Field(default=None, description="Set when editing an existing post")
    title: str = ""
    content: str = ""

    @classmethod
    def blank(cls) -> "PostForm":
        return cls()

    @classmethod
    def from_post(cls, post: Post) -> "PostForm":
        return cls(id=post.id, title=post.title, content=post.content)

    @classmethod
    def from_input(cls, form: PostInput, post_id: Optional[int] = None) -> "PostForm":
        return cls(id=post_id, title=form.title, content=form.content)


class PostView(BaseModel):
    """Full representation of a post for the index and show pages."""
    id: int
    title: str
    content: str
    author_id: Optional[int] = None
    author_email: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_post(cls, post: Post) -> "PostView":
        # post.author is eager-loaded (lazy="joined") on every query path
        return cls(
            id=post.id,
            title=post.title,
            content=post.content,
            author_id=post.author_id,
            author_email=post.author.email if post.author else None,
            created_at=post.created_at,
            updated_at=post.updated_at,
        )
