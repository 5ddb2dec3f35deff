# crud_blog/routes/posts.py
import logging
import math
from typing import Any

from fastapi import APIRouter, Depends, Form, Query, Request
from fastapi.responses import HTMLResponse, RedirectResponse, Response

from crud_blog.context import AppContext, get_context, get_repository
from crud_blog.errors import ValidationError, render_error
from crud_blog.repository import PostRepository
from crud_blog.store import Post
from crud_blog.validation import COMMENT_RULES, POST_RULES, validate

logger = logging.getLogger(__name__)

router = APIRouter(tags=["posts"])

FLASH_MESSAGES = {
    "created": "Post created.",
    "updated": "Post updated.",
    "deleted": "Post deleted.",
}


def _redirect_to_index(status: str) -> RedirectResponse:
    return RedirectResponse(url=f"/posts?status={status}", status_code=303)


def _render_form(
    request: Request,
    context: AppContext,
    post: Post | None = None,
    old: dict[str, Any] | None = None,
    errors: dict[str, list[str]] | None = None,
    status_code: int = 200,
) -> HTMLResponse:
    if old is None:
        old = {"title": post.title, "body": post.body} if post else {}
    return context.templates.TemplateResponse(
        request,
        "posts/form.html",
        {
            "post": post,
            "old": old,
            "errors": errors or {},
            "action": f"/posts/{post.id}" if post else "/posts",
            "method": "PUT" if post else "POST",
        },
        status_code=status_code,
    )


@router.get("/", include_in_schema=False)
async def home() -> RedirectResponse:
    return RedirectResponse(url="/posts", status_code=303)


@router.get("/posts", response_class=HTMLResponse)
async def index(
    request: Request,
    page: int = Query(1, ge=1),
    status: str | None = None,
    repo: PostRepository = Depends(get_repository),
    context: AppContext = Depends(get_context),
):
    page_size = context.settings.page_size
    total = await repo.count()
    posts = await repo.list(offset=(page - 1) * page_size, limit=page_size)

    return context.templates.TemplateResponse(
        request,
        "posts/index.html",
        {
            "posts": posts,
            "page": page,
            "pages": max(1, math.ceil(total / page_size)),
            "total": total,
            "flash": FLASH_MESSAGES.get(status or ""),
        },
    )


@router.get("/posts/create", response_class=HTMLResponse)
async def create_form(
    request: Request, context: AppContext = Depends(get_context)
):
    return _render_form(request, context)


@router.post("/posts")
async def store(
    request: Request,
    title: str = Form(""),
    body: str = Form(""),
    repo: PostRepository = Depends(get_repository),
    context: AppContext = Depends(get_context),
):
    submitted = {"title": title, "body": body}
    try:
        fields = validate(POST_RULES, submitted)
    except ValidationError as e:
        return _render_form(
            request, context, old=e.old, errors=e.errors, status_code=e.status_code
        )

    await repo.create(fields)
    return _redirect_to_index("created")


@router.get("/posts/{post_id}", response_class=HTMLResponse)
async def show(
    request: Request,
    post_id: int,
    repo: PostRepository = Depends(get_repository),
    context: AppContext = Depends(get_context),
):
    post = await repo.find(post_id)
    return await _render_show(request, context, repo, post)


async def _render_show(
    request: Request,
    context: AppContext,
    repo: PostRepository,
    post: Post,
    old: dict[str, Any] | None = None,
    errors: dict[str, list[str]] | None = None,
    status_code: int = 200,
) -> HTMLResponse:
    comments = await repo.comments(post.id)
    return context.templates.TemplateResponse(
        request,
        "posts/show.html",
        {
            "post": post,
            "comments": comments,
            "old": old or {},
            "errors": errors or {},
        },
        status_code=status_code,
    )


@router.get("/posts/{post_id}/edit", response_class=HTMLResponse)
async def edit_form(
    request: Request,
    post_id: int,
    repo: PostRepository = Depends(get_repository),
    context: AppContext = Depends(get_context),
):
    post = await repo.find(post_id)
    return _render_form(request, context, post=post)


async def _update(
    request: Request,
    context: AppContext,
    repo: PostRepository,
    post_id: int,
    submitted: dict[str, Any],
) -> Response:
    post = await repo.find(post_id)
    try:
        fields = validate(POST_RULES, submitted)
    except ValidationError as e:
        return _render_form(
            request,
            context,
            post=post,
            old=e.old,
            errors=e.errors,
            status_code=e.status_code,
        )

    await repo.update(post_id, fields)
    return _redirect_to_index("updated")


async def _destroy(repo: PostRepository, post_id: int) -> Response:
    await repo.delete(post_id)
    return _redirect_to_index("deleted")


@router.api_route("/posts/{post_id}", methods=["PUT", "PATCH"])
async def update(
    request: Request,
    post_id: int,
    title: str = Form(""),
    body: str = Form(""),
    repo: PostRepository = Depends(get_repository),
    context: AppContext = Depends(get_context),
):
    return await _update(
        request, context, repo, post_id, {"title": title, "body": body}
    )


@router.delete("/posts/{post_id}")
async def destroy(post_id: int, repo: PostRepository = Depends(get_repository)):
    return await _destroy(repo, post_id)


@router.post("/posts/{post_id}")
async def method_override(
    request: Request,
    post_id: int,
    method: str = Form("", alias="_method"),
    title: str = Form(""),
    body: str = Form(""),
    repo: PostRepository = Depends(get_repository),
    context: AppContext = Depends(get_context),
):
    """HTML forms only speak GET and POST; a hidden _method field carries the rest."""
    verb = method.upper()
    if verb in ("PUT", "PATCH"):
        return await _update(
            request, context, repo, post_id, {"title": title, "body": body}
        )
    if verb == "DELETE":
        return await _destroy(repo, post_id)
    return render_error(request, 405, f"Unsupported method override {method!r}")


@router.post("/posts/{post_id}/comments")
async def store_comment(
    request: Request,
    post_id: int,
    body: str = Form(""),
    repo: PostRepository = Depends(get_repository),
    context: AppContext = Depends(get_context),
):
    post = await repo.find(post_id)
    try:
        fields = validate(COMMENT_RULES, {"body": body})
    except ValidationError as e:
        return await _render_show(
            request,
            context,
            repo,
            post,
            old=e.old,
            errors=e.errors,
            status_code=e.status_code,
        )

    await repo.add_comment(post_id, fields)
    return RedirectResponse(url=f"/posts/{post_id}", status_code=303)
