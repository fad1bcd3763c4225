"""
Blog Backend — Registration Route Handlers
============================================

GET  /users/new   registration form
POST /users       create the account and log it in
"""

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse, RedirectResponse

from blog.context import RequestContext, get_request_context, render
from blog.exceptions import ValidationFailedError
from blog.schemas.user import RegistrationInput, UserForm
from blog.schemas.view import ViewResponse
from blog.services.user_service import user_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["Users"])


@router.get(
    "/new",
    response_class=JSONResponse,
    responses={200: {"description": "Registration form", "model": ViewResponse}},
    summary="Registration form",
)
async def new_user(ctx: RequestContext = Depends(get_request_context)) -> JSONResponse:
    return await render(ctx, "users/new", {"user": UserForm(), "errors": {}})


@router.post(
    "",
    response_class=JSONResponse,
    responses={
        303: {"description": "Registered and logged in; redirect home"},
        422: {"description": "Form re-rendered with field errors", "model": ViewResponse},
    },
    summary="Register a new user",
)
async def create_user(
    form: RegistrationInput = Depends(RegistrationInput.as_form),
    ctx: RequestContext = Depends(get_request_context),
):
    """
    Creates the account and stores its id in the session (auto-login).

    A failed registration re-renders the form with the email only; the
    password is never sent back.
    """
    try:
        user = await user_service.register(ctx.db, form)
    except ValidationFailedError as e:
        return await render(
            ctx,
            "users/new",
            {"user": UserForm(email=form.email), "errors": e.errors},
            status_code=422,
        )
    ctx.log_in(user.id)
    return RedirectResponse(url="/", status_code=303)
