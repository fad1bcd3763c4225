"""
Blog Backend — Request ID Middleware
======================================

What:  Gives each request a short correlation ID and returns it in the
       X-Request-ID response header.
Why:   Every log line written while handling a request can be tied back to
       it, and error responses carry the same ID for support.
How:   Reuses a client-supplied X-Request-ID, otherwise generates one; stores
       it in a ContextVar (for loggers and exception handlers) and in
       request.state (for route handlers).
"""

import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

# Coroutine-local: concurrent requests on the same thread each see their own
request_id_var: ContextVar[str] = ContextVar("request_id", default="")


class RequestIDMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        # 8 hex chars are plenty for correlating log lines
        rid = request.headers.get("X-Request-ID") or uuid.uuid4().hex[:8]
        request_id_var.set(rid)
        request.state.request_id = rid

        response = await call_next(request)
        response.headers["X-Request-ID"] = rid
        return response
