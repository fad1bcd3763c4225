"""
Blog Backend — User SQLAlchemy Model
======================================

What:  ORM model for the `users` table, plus bcrypt password helpers.
Why:   Users own posts and are the identity stored in the session cookie.
Who:   Used by UserService (registration, login) and Auth (session lookup).

Password storage:
    Only a bcrypt digest is stored (`password_digest`). bcrypt embeds its own
    random salt and work factor in the digest string, so verifying needs
    nothing but the digest and the candidate password.

    bcrypt only looks at the first 72 bytes of its input; newer releases
    reject longer input outright. Registration refuses such passwords and
    verification treats them as a mismatch.
"""

from typing import TYPE_CHECKING, List, Optional

import bcrypt
from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from blog.config import settings
from blog.database import Base, TimestampMixin

if TYPE_CHECKING:
    from blog.models.post import Post

BCRYPT_MAX_BYTES = 72


def hash_password(password: str, rounds: Optional[int] = None) -> str:
    """Returns a salted bcrypt digest of `password` as text."""
    salt = bcrypt.gensalt(rounds=rounds or settings.bcrypt_rounds)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(password: str, digest: str) -> bool:
    encoded = password.encode("utf-8")
    if not digest or len(encoded) > BCRYPT_MAX_BYTES:
        return False
    try:
        return bcrypt.checkpw(encoded, digest.encode("utf-8"))
    except ValueError:
        # Malformed digest in the database
        return False


class User(Base, TimestampMixin):
    """
    A registered author.

    Lifecycle:
        Created by POST /users; never updated or deleted by this application.
    """

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # Uniqueness is checked before insert and enforced again by the unique
    # index, which catches two registrations racing for the same email.
    email: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        unique=True,
        index=True,
    )

    password_digest: Mapped[str] = mapped_column(String(255), nullable=False)

    # Never loaded implicitly: nothing in a request needs a user's post list,
    # and an accidental lazy load would fail under asyncio anyway.
    posts: Mapped[List["Post"]] = relationship(
        "Post",
        back_populates="author",
        lazy="raise_on_sql",
    )

    def authenticate(self, password: str) -> bool:
        """True iff `password` matches the stored digest."""
        return verify_password(password, self.password_digest)

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email='{self.email}')>"
