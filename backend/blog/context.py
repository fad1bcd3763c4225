"""
Blog Backend — Request Context and Rendering
==============================================

What:  The per-request object every handler receives, and the `render`
       primitive that turns a view name plus locals into a response.
Why:   Handlers need the database session, the signed session cookie and a
       channel for one-shot notices. Passing them around explicitly as one
       object keeps handlers free of module-level request state.
How:   `get_request_context` is a FastAPI dependency; FastAPI caches it per
       request, so the Auth object, the handler and `render` share one
       instance and one current-user lookup.

Notices:
    Stored in the session under `_notices` so they survive a redirect, and
    removed by the next `render`. A notice therefore appears on exactly one
    page: the one after the redirect, or the current one if the handler
    renders directly.
"""

from typing import Any, Dict, List, Optional
from urllib.parse import urlsplit

from fastapi import Depends, Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from blog.database import get_db_session
from blog.models.user import User
from blog.schemas.user import UserView
from blog.schemas.view import Notice, NoticeKind, ViewResponse
from blog.services.user_service import user_service

NOTICES_KEY = "_notices"
SESSION_USER_KEY = "id"

_UNRESOLVED = object()


def flash(request: Request, kind: NoticeKind, message: str) -> None:
    """Queues a notice for the next rendered page."""
    notices = request.session.get(NOTICES_KEY, [])
    notices.append({"kind": kind, "message": message})
    request.session[NOTICES_KEY] = notices


class RequestContext:
    """
    Request-scoped state handed to every handler.

    Attributes:
        request: The Starlette request (session, headers)
        db:      This request's AsyncSession
    """

    def __init__(self, request: Request, db: AsyncSession):
        self.request = request
        self.db = db
        self._current_user = _UNRESOLVED

    @property
    def session(self) -> Dict[str, Any]:
        return self.request.session

    @property
    def referrer(self) -> Optional[str]:
        """
        The Referer header, if it points back into this site.

        Relative paths and absolute URLs with this request's scheme and host
        are kept; anything else (other hosts, `//host` paths) is None.
        """
        raw = self.request.headers.get("referer")
        if not raw:
            return None
        parts = urlsplit(raw)
        if not parts.scheme and not parts.netloc:
            return raw if raw.startswith("/") and not raw.startswith("/\\") else None
        url = self.request.url
        if (parts.scheme, parts.netloc) == (url.scheme, url.netloc):
            return raw
        return None

    @property
    def session_user_id(self) -> Optional[int]:
        """The user id stored at login, or None if absent or not an integer."""
        raw = self.session.get(SESSION_USER_KEY)
        if isinstance(raw, bool):
            return None
        if isinstance(raw, int):
            return raw
        if isinstance(raw, str) and raw.isascii() and raw.isdigit():
            return int(raw)
        return None

    async def current_user(self) -> Optional[User]:
        """
        The User whose id is in the session, or None.

        Looked up at most once per request. None when the session has no id,
        the id is malformed, or the user no longer exists; the session itself
        is left untouched either way.
        """
        if self._current_user is _UNRESOLVED:
            user_id = self.session_user_id
            user = None
            if user_id is not None:
                user = await user_service.find_by_id(self.db, user_id)
            self._current_user = user
        return self._current_user

    def log_in(self, user_id: int) -> None:
        self.session[SESSION_USER_KEY] = user_id
        self._current_user = _UNRESOLVED

    def flash(self, kind: NoticeKind, message: str) -> None:
        flash(self.request, kind, message)

    def consume_notices(self) -> List[Notice]:
        """Removes and returns every pending notice."""
        raw = self.session.pop(NOTICES_KEY, [])
        return [Notice(**item) for item in raw]


async def get_request_context(
    request: Request,
    db: AsyncSession = Depends(get_db_session),
) -> RequestContext:
    return RequestContext(request, db)


async def render(
    ctx: RequestContext,
    view: str,
    locals: Optional[Dict[str, Any]] = None,
    status_code: int = 200,
) -> JSONResponse:
    """
    Renders `view` with `locals`, the pending notices and the current user.

    Locals may hold pydantic models, lists of them, or plain values;
    jsonable_encoder takes care of datetimes and nested models.
    """
    user = await ctx.current_user()
    envelope = ViewResponse(
        view=view,
        notices=ctx.consume_notices(),
        current_user=UserView.model_validate(user) if user is not None else None,
        locals=locals or {},
    )
    return JSONResponse(status_code=status_code, content=jsonable_encoder(envelope))
