"""
Blog Backend — Login Route Handlers
=====================================

GET  /login   login form
POST /login   check credentials and start a session

There is no logout route; a session lasts until the cookie expires
(settings.session_max_age).
"""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse, RedirectResponse

from blog.context import RequestContext, get_request_context, render
from blog.exceptions import InvalidCredentialsError
from blog.schemas.user import LoginInput
from blog.schemas.view import ViewResponse
from blog.services.user_service import user_service

router = APIRouter(tags=["Sessions"])


@router.get(
    "/login",
    response_class=JSONResponse,
    responses={200: {"description": "Login form", "model": ViewResponse}},
    summary="Login form",
)
async def login_form(ctx: RequestContext = Depends(get_request_context)) -> JSONResponse:
    return await render(ctx, "sessions/login", {"error": None})


@router.post(
    "/login",
    response_class=JSONResponse,
    responses={
        303: {"description": "Logged in; redirect home"},
        401: {"description": "Login form re-rendered with an error", "model": ViewResponse},
    },
    summary="Log in",
)
async def login(
    form: LoginInput = Depends(LoginInput.as_form),
    ctx: RequestContext = Depends(get_request_context),
):
    try:
        user = await user_service.authenticate(ctx.db, form)
    except InvalidCredentialsError as e:
        # Credentials are not echoed back, not even the email
        return await render(ctx, "sessions/login", {"error": e.message}, status_code=401)
    ctx.log_in(user.id)
    return RedirectResponse(url="/", status_code=303)
