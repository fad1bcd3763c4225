"""
Blog Backend — Post Route Handlers
====================================

What:  Listing, detail, and the author-only new/create/edit/update/destroy flow.
How:   Gates are FastAPI dependencies that raise on failure:

           resolve_post      → EntityNotFoundError   (any /posts/{id} route)
           authorized_post   → resolve_post, then Auth.require_authorization

       so a handler body only ever runs with an existing post and, for the
       mutating routes, a logged-in owner. Everything else (notice, redirect)
       is done by the exception handlers in main.py.

Route Inventory:
    GET    /                    listing (same as /posts)
    GET    /posts               listing
    GET    /posts/new           blank form            (login required)
    POST   /posts               create                (login required)
    GET    /posts/{id}          detail
    GET    /posts/{id}/edit     pre-filled form       (owner only)
    PATCH  /posts/{id}          update                (owner only)
    DELETE /posts/{id}          destroy               (owner only)
"""

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse, RedirectResponse

from blog.context import RequestContext, get_request_context, render
from blog.exceptions import EntityNotFoundError, ValidationFailedError
from blog.models.post import Post
from blog.schemas.post import PostForm, PostInput, PostView
from blog.schemas.view import ViewResponse
from blog.services.auth import Auth, get_auth
from blog.services.post_service import post_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Posts"])

# 303 so a redirect after POST/PATCH/DELETE is followed with a GET
SEE_OTHER = 303

VIEW_RESPONSES = {200: {"description": "Rendered view", "model": ViewResponse}}
FORM_RESPONSES = {
    **VIEW_RESPONSES,
    303: {"description": "Saved (or gate failed); redirect with notice"},
    422: {"description": "Form re-rendered with field errors", "model": ViewResponse},
}


# ══════════════════════════════════════════════════════════════════════════
# Gates
# ══════════════════════════════════════════════════════════════════════════

async def resolve_post(
    post_id: str,
    ctx: RequestContext = Depends(get_request_context),
) -> Post:
    """Loads the post named in the path, or raises EntityNotFoundError."""
    post = await post_service.find_post(ctx.db, post_id)
    if post is None:
        raise EntityNotFoundError(resource="post", resource_id=post_id)
    return post


async def authorized_post(
    post: Post = Depends(resolve_post),
    auth: Auth = Depends(get_auth),
) -> Post:
    """resolve_post, then require the current user to be its author."""
    await auth.require_authorization(post)
    return post


# ══════════════════════════════════════════════════════════════════════════
# Handlers
# ══════════════════════════════════════════════════════════════════════════

@router.get("/", response_class=JSONResponse, responses=VIEW_RESPONSES, summary="Home page: all posts")
@router.get("/posts", response_class=JSONResponse, responses=VIEW_RESPONSES, summary="List all posts")
async def list_posts(ctx: RequestContext = Depends(get_request_context)) -> JSONResponse:
    posts = await post_service.list_posts(ctx.db)
    return await render(ctx, "posts/index", {"posts": [PostView.from_post(p) for p in posts]})


# Declared before /posts/{post_id} so "new" isn't taken for an id
@router.get("/posts/new", response_class=JSONResponse, responses=VIEW_RESPONSES, summary="New post form")
async def new_post(
    ctx: RequestContext = Depends(get_request_context),
    auth: Auth = Depends(get_auth),
) -> JSONResponse:
    await auth.require_login()
    return await render(ctx, "posts/new", {"post": PostForm.blank(), "errors": {}})


@router.post("/posts", response_class=JSONResponse, responses=FORM_RESPONSES, summary="Create a post")
async def create_post(
    form: PostInput = Depends(PostInput.as_form),
    ctx: RequestContext = Depends(get_request_context),
    auth: Auth = Depends(get_auth),
):
    """
    Saves a post owned by the current user.

    On invalid input the new-post form comes back with what was typed, so a
    filled-in content field isn't lost because the title was empty.
    """
    user = await auth.require_login()
    try:
        await post_service.create_post(ctx.db, user, form)
    except ValidationFailedError as e:
        return await render(
            ctx,
            "posts/new",
            {"post": PostForm.from_input(form), "errors": e.errors},
            status_code=422,
        )
    return RedirectResponse(url="/posts", status_code=SEE_OTHER)


@router.get("/posts/{post_id}", response_class=JSONResponse, responses=VIEW_RESPONSES, summary="Show a post")
async def show_post(
    post: Post = Depends(resolve_post),
    ctx: RequestContext = Depends(get_request_context),
) -> JSONResponse:
    return await render(ctx, "posts/show", {"post": PostView.from_post(post)})


@router.get("/posts/{post_id}/edit", response_class=JSONResponse, responses=VIEW_RESPONSES, summary="Edit post form")
async def edit_post(
    post: Post = Depends(authorized_post),
    ctx: RequestContext = Depends(get_request_context),
) -> JSONResponse:
    return await render(ctx, "posts/edit", {"post": PostForm.from_post(post), "errors": {}})


@router.patch("/posts/{post_id}", response_class=JSONResponse, responses=FORM_RESPONSES, summary="Update a post")
async def update_post(
    post: Post = Depends(authorized_post),
    form: PostInput = Depends(PostInput.as_form),
    ctx: RequestContext = Depends(get_request_context),
):
    try:
        await post_service.update_post(ctx.db, post, form)
    except ValidationFailedError as e:
        return await render(
            ctx,
            "posts/edit",
            {"post": PostForm.from_input(form, post_id=post.id), "errors": e.errors},
            status_code=422,
        )
    ctx.flash("success", "Post successfully updated")
    return RedirectResponse(url=f"/posts/{post.id}", status_code=SEE_OTHER)


@router.delete("/posts/{post_id}", response_class=JSONResponse, responses=FORM_RESPONSES, summary="Delete a post")
async def destroy_post(
    post: Post = Depends(authorized_post),
    ctx: RequestContext = Depends(get_request_context),
) -> RedirectResponse:
    await post_service.delete_post(ctx.db, post)
    return RedirectResponse(url="/posts", status_code=SEE_OTHER)
