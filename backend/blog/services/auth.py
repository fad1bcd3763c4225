"""
Blog Backend — Authentication and Authorization
=================================================

What:  Resolves who is making the request and whether they may change a post.
Who:   Injected into the post, user and session handlers via `get_auth`.
How:   One `Auth` object per request wraps the RequestContext. Gates raise
       (NotAuthenticatedError, NotAuthorizedError) instead of returning a
       redirect, so nothing after a failed gate runs; main.py's exception
       handlers turn the error into a notice plus a redirect.

Gate order for edit/update/destroy:
    1. resolve the post (EntityNotFoundError if missing)
    2. require_login      (NotAuthenticatedError)
    3. can_modify         (NotAuthorizedError)
"""

import logging
from typing import Optional

from fastapi import Depends

from blog.context import RequestContext, get_request_context
from blog.exceptions import NotAuthenticatedError, NotAuthorizedError
from blog.models.post import Post
from blog.models.user import User

logger = logging.getLogger(__name__)


def can_modify(user: Optional[User], post: Post) -> bool:
    """True iff `user` is present and is the author of `post`."""
    return user is not None and post.author_id is not None and user.id == post.author_id


class Auth:
    """Per-request identity and permission checks over a RequestContext."""

    def __init__(self, ctx: RequestContext):
        self.ctx = ctx

    async def current_user(self) -> Optional[User]:
        """The logged-in User or None; resolved once per request by the context."""
        return await self.ctx.current_user()

    async def is_logged_in(self) -> bool:
        return await self.current_user() is not None

    async def require_login(self) -> User:
        """
        Returns the current user, or raises NotAuthenticatedError.

        The redirect goes back to the Referer only when it is on this site.
        """
        user = await self.current_user()
        if user is None:
            raise NotAuthenticatedError(
                redirect_to=self.ctx.referrer,
                context={"path": self.ctx.request.url.path},
            )
        return user

    async def require_authorization(self, post: Post) -> User:
        """Requires a logged-in user who owns `post`; returns that user."""
        user = await self.require_login()
        if not can_modify(user, post):
            logger.warning(
                "User %s denied modification of post %s (author %s)",
                user.id, post.id, post.author_id,
            )
            raise NotAuthorizedError(resource="post", resource_id=post.id)
        return user


def get_auth(ctx: RequestContext = Depends(get_request_context)) -> Auth:
    return Auth(ctx)
