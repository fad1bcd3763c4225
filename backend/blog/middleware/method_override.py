"""
Blog Backend — HTTP Method Override Middleware
================================================

What:  Lets a POST stand in for PATCH, PUT or DELETE.
Why:   HTML forms can only submit GET and POST, but the post routes use
       PATCH /posts/{id} and DELETE /posts/{id}.
How:   A POST carrying `?_method=DELETE` (or an X-HTTP-Method-Override
       header) has its scope method rewritten before routing.

The override is read from the query string rather than a hidden form field
because reading the body here would consume it before the route's Form()
dependencies get to parse it.
"""

import logging

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger(__name__)

OVERRIDE_PARAM = "_method"
OVERRIDE_HEADER = "X-HTTP-Method-Override"
ALLOWED_METHODS = {"PATCH", "PUT", "DELETE"}


class MethodOverrideMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.method == "POST":
            override = (
                request.query_params.get(OVERRIDE_PARAM)
                or request.headers.get(OVERRIDE_HEADER)
                or ""
            ).upper()
            if override in ALLOWED_METHODS:
                logger.debug("Method override: POST -> %s %s", override, request.url.path)
                request.scope["method"] = override
        return await call_next(request)
