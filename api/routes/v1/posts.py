"""
api/routes/v1/posts.py -- Blog post routes for the Inkwell REST API.

Routes (in registration order to avoid FastAPI path capture conflicts):
  GET    /posts                         -- paginated list, newest first (public)
  POST   /posts                         -- create post as the caller (auth)
  GET    /posts/{post_id}               -- single post with author username (public)
  PUT    /posts/{post_id}               -- partial update, author only (auth)
  DELETE /posts/{post_id}               -- delete, author only (auth)
  GET    /accounts/{account_id}/posts   -- paginated posts of one account (auth)

The author of a new post is always the authenticated caller; the body has no
author field. Author usernames are looked up in one batch per page through
AccountStore.get_usernames(); a post whose author was removed shows
author_username = null.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, Response

from api.models import Pagination, PostCreate, PostListResponse, PostResponse, PostUpdate
from auth.dependencies import get_current_account
from auth.models import PublicAccount
from auth.service import AccountService, check_account_id
from auth.store import AccountStore
from blog.models import PageInfo, Post
from blog.store import PostStore
from blog.validation import check_post_id, validate_post, validate_post_update
from core.errors import Forbidden, NotFound, ValidationError

router = APIRouter()

_DEFAULT_LIMIT = 10
_MAX_LIMIT = 100
_MAX_PAGE = 1_000_000


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _to_response(request: Request, post: Post) -> PostResponse:
    accounts: AccountStore = request.app.state.account_store
    names = accounts.get_usernames([post.author_id])
    return PostResponse.from_post(post, names.get(post.author_id))


def _page_response(request: Request, page: int, limit: int, author_id: Optional[str]) -> PostListResponse:
    posts_store: PostStore = request.app.state.post_store
    accounts: AccountStore = request.app.state.account_store
    posts, total = posts_store.list_posts(page=page, limit=limit, author_id=author_id)
    names = accounts.get_usernames([p.author_id for p in posts])
    return PostListResponse(
        items=[PostResponse.from_post(p, names.get(p.author_id)) for p in posts],
        pagination=Pagination.from_page(PageInfo(page=page, limit=limit, total=total)),
    )


def _owned_post(request: Request, post_id: str, account: PublicAccount) -> Post:
    """Fetch a post for modification. 404 if absent, 403 if the caller is not its author."""
    check_post_id(post_id)
    store: PostStore = request.app.state.post_store
    post = store.get_post(post_id)
    if post is None:
        raise NotFound("Blog post not found.")
    if post.author_id != account.id:
        raise Forbidden()
    return post


# ---------------------------------------------------------------------------
# GET /posts -- paginated list
# ---------------------------------------------------------------------------


@router.get("/posts", response_model=PostListResponse)
def list_posts(
    request: Request,
    page: int = Query(1, ge=1, le=_MAX_PAGE),
    limit: int = Query(_DEFAULT_LIMIT, ge=1, le=_MAX_LIMIT),
    author_id: Optional[str] = Query(None),
) -> PostListResponse:
    """List posts newest first. author_id narrows the list to one account."""
    if author_id is not None:
        check_account_id(author_id)
    return _page_response(request, page, limit, author_id)


# ---------------------------------------------------------------------------
# POST /posts -- create
# ---------------------------------------------------------------------------


@router.post("/posts", response_model=PostResponse, status_code=201)
def create_post(
    request: Request,
    body: PostCreate,
    current_account: PublicAccount = Depends(get_current_account),
) -> PostResponse:
    errors = validate_post(body.model_dump())
    if errors:
        raise ValidationError(errors)
    store: PostStore = request.app.state.post_store
    post = store.create_post(
        Post(
            author_id=current_account.id,
            title=body.title,
            description=body.description,
            content=body.content,
        )
    )
    return PostResponse.from_post(post, current_account.username)


# ---------------------------------------------------------------------------
# /posts/{post_id}
# ---------------------------------------------------------------------------


@router.get("/posts/{post_id}", response_model=PostResponse)
def get_post(request: Request, post_id: str) -> PostResponse:
    check_post_id(post_id)
    store: PostStore = request.app.state.post_store
    post = store.get_post(post_id)
    if post is None:
        raise NotFound("Blog post not found.")
    return _to_response(request, post)


@router.put("/posts/{post_id}", response_model=PostResponse)
def update_post(
    request: Request,
    post_id: str,
    body: PostUpdate,
    current_account: PublicAccount = Depends(get_current_account),
) -> PostResponse:
    """Update any of title/description/content. Omitted fields are left unchanged."""
    _owned_post(request, post_id, current_account)
    fields = body.model_dump(exclude_none=True)
    errors = validate_post_update(fields)
    if errors:
        raise ValidationError(errors)
    store: PostStore = request.app.state.post_store
    updated = store.update_post(post_id, **fields)
    if updated is None:
        # Deleted between the ownership check and the update.
        raise NotFound("Blog post not found.")
    return PostResponse.from_post(updated, current_account.username)


@router.delete("/posts/{post_id}", status_code=204)
def delete_post(
    request: Request,
    post_id: str,
    current_account: PublicAccount = Depends(get_current_account),
) -> Response:
    _owned_post(request, post_id, current_account)
    store: PostStore = request.app.state.post_store
    if not store.delete_post(post_id):
        raise NotFound("Blog post not found.")
    return Response(status_code=204)


# ---------------------------------------------------------------------------
# GET /accounts/{account_id}/posts
# ---------------------------------------------------------------------------


@router.get("/accounts/{account_id}/posts", response_model=PostListResponse)
def list_account_posts(
    request: Request,
    account_id: str,
    page: int = Query(1, ge=1, le=_MAX_PAGE),
    limit: int = Query(_DEFAULT_LIMIT, ge=1, le=_MAX_LIMIT),
    current_account: PublicAccount = Depends(get_current_account),
) -> PostListResponse:
    """List one account's posts. 404 if the account does not exist."""
    service: AccountService = request.app.state.account_service
    account = service.get_by_id(account_id)
    return _page_response(request, page, limit, account.id)
