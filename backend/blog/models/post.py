"""
Blog Backend — Post SQLAlchemy Model
======================================

What:  ORM model representing the `posts` table.
Who:   Used by PostService for CRUD operations and by Alembic for schema
       management.

Table Design:
    - Integer primary key, assigned by the database
    - title / content: presence is validated by PostService before any write;
      the NOT NULL constraints are the last line behind that
    - author_id: nullable foreign key to users.id. Only the ORM object is
      ever without an author, between construction and flush
    - Index on author_id: ownership lookups and future "posts by author" pages
"""

from typing import TYPE_CHECKING, Optional

from sqlalchemy import ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from blog.database import Base, TimestampMixin

if TYPE_CHECKING:
    from blog.models.user import User

TITLE_MAX_LENGTH = 255


class Post(Base, TimestampMixin):
    """
    A blog post.

    Lifecycle:
        1. Created by a logged-in user, who becomes its author
        2. Title/content updated only by the author (id and author_id never change)
        3. Deleted only by the author
    """

    __tablename__ = "posts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    title: Mapped[str] = mapped_column(String(TITLE_MAX_LENGTH), nullable=False)

    content: Mapped[str] = mapped_column(Text, nullable=False)

    author_id: Mapped[Optional[int]] = mapped_column(
        Integer,
        ForeignKey("users.id"),
        nullable=True,
        index=True,
    )

    # Joined: every page that shows a post also shows who wrote it
    author: Mapped[Optional["User"]] = relationship(
        "User",
        back_populates="posts",
        lazy="joined",
    )

    def __repr__(self) -> str:
        return f"<Post(id={self.id}, title='{self.title}', author_id={self.author_id})>"
