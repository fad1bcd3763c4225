"""
Blog Backend — Response Envelopes
===================================

What:  The shapes of every response body the backend produces.
Why:   HTML templating lives outside this service. A rendered page is
       returned as a "view envelope" naming the template and carrying its
       locals plus the notices to display; the front end turns that into HTML.

Example envelope:
    {
        "view": "posts/show",
        "notices": [{"kind": "success", "message": "Post successfully updated"}],
        "current_user": {"id": 3, "email": "author@example.com"},
        "locals": {"post": {"id": 7, "title": "Hello", ...}}
    }
"""

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field

from blog.schemas.user import UserView

NoticeKind = Literal["error", "success"]


class Notice(BaseModel):
    """A one-shot message shown on the next rendered page."""
    kind: NoticeKind = Field(description="error or success")
    message: str = Field(description="Human-readable text")


class ViewResponse(BaseModel):
    view: str = Field(description="Template name, e.g. posts/index")
    notices: List[Notice] = Field(default_factory=list)
    current_user: Optional[UserView] = Field(default=None, description="Logged-in user, null when anonymous")
    locals: Dict[str, Any] = Field(default_factory=dict)


class ErrorResponse(BaseModel):
    """
    Body for errors that aren't turned into a redirect or a form re-render.

    Fields:
        error: Machine-readable error code
        message: Human-readable description
        details: Optional extra context (e.g. field errors)
        request_id: Correlation ID for tracing this error in server logs
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
