"""
Blog Backend — Custom Exception Hierarchy
===========================================

What:  Application-specific exceptions for every way a request can fail.
Why:   Gates (login, ownership, lookup) short-circuit the handler by raising;
       global handlers registered in main.py turn each kind into a notice
       plus a redirect, or into an error response.
How:   Each exception carries a user-facing message and an optional context
       dict (logged, never returned to the client).

Exception Hierarchy:
    BlogError (base)
    ├── NotAuthenticatedError    → notice + 303 to referrer or /login
    ├── NotAuthorizedError       → notice + 303 to /posts
    ├── EntityNotFoundError      → notice + 303 to /posts
    ├── RouteNotFoundError       → notice + 303 to /posts
    ├── ValidationFailedError    → form re-rendered with field errors (422)
    ├── InvalidCredentialsError  → login form re-rendered (401)
    └── DatabaseError            → 500 Internal Server Error

ValidationFailedError and InvalidCredentialsError are normally caught by the
route that can re-render the offending form; the global handlers only see
them if a route doesn't.
"""

from typing import Any, Dict, List, Optional


class BlogError(Exception):
    """
    Base exception for all application errors.

    Attributes:
        message:      User-facing description (safe to show as a notice)
        context:      Additional debug info (logged but NOT returned to client)
        redirect_to:  Where the redirecting handlers send the client, if anywhere
    """

    redirect_to: Optional[str] = None

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class NotAuthenticatedError(BlogError):
    """
    Raised by Auth.require_login() when no user is logged in.

    Redirects back to where the client came from (the Referer header) so the
    notice shows up on the page that linked to the protected action; falls
    back to the login page.
    """

    def __init__(
        self,
        redirect_to: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            message="You must be logged in to view that page",
            context=context,
        )
        self.redirect_to = redirect_to or "/login"


class NotAuthorizedError(BlogError):
    """Raised when a logged-in user tries to change a post they don't own."""

    redirect_to = "/posts"

    def __init__(
        self,
        resource: str = "post",
        resource_id: Optional[Any] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"You are not authorized to modify that {resource}"
        if resource_id is not None:
            message = f"You are not authorized to modify {resource} {resource_id}"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id is not None:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class EntityNotFoundError(BlogError):
    """
    Raised when a requested record does not exist.

    SQLAlchemy returns None for missing rows; post lookup converts that into
    this exception so the handler body never runs with a missing post.
    """

    redirect_to = "/posts"

    def __init__(
        self,
        resource: str = "post",
        resource_id: Optional[Any] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"Couldn't find that {resource}"
        if resource_id is not None:
            message = f"Couldn't find {resource} with id {resource_id}"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id is not None:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class RouteNotFoundError(BlogError):
    """Built by the 404/405 handler for any path or method no route matches."""

    redirect_to = "/posts"

    def __init__(self, path: str = "", context: Optional[Dict[str, Any]] = None):
        ctx = context or {}
        ctx["path"] = path
        super().__init__(message="Whoops! Couldn't find that route", context=ctx)


class ValidationFailedError(BlogError):
    """
    Raised when submitted form values can't be persisted.

    Attributes:
        errors: field name → list of full messages, e.g.
                {"title": ["Title can't be blank"]}
    """

    def __init__(
        self,
        errors: Dict[str, List[str]],
        context: Optional[Dict[str, Any]] = None,
    ):
        self.errors = errors
        super().__init__(
            message="; ".join(self.full_messages) or "Validation failed",
            context=context,
        )

    @property
    def full_messages(self) -> List[str]:
        return [msg for field_errors in self.errors.values() for msg in field_errors]


class InvalidCredentialsError(BlogError):
    """
    Raised when a login email/password pair doesn't match a user.

    Deliberately the same message whether the email is unknown or the
    password is wrong.
    """

    def __init__(self, context: Optional[Dict[str, Any]] = None):
        super().__init__(message="Incorrect email or password", context=context)


class DatabaseError(BlogError):
    """
    Raised when database operations fail unexpectedly.

    The message returned to the client is always generic; the SQL error is
    logged server-side only.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
