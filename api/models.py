"""
API request and response models for Inkwell REST endpoints.

These Pydantic v2 models define the HTTP transport contract for the API layer.
They are intentionally separate from the dataclasses in auth/models.py and
blog/models.py, which own the internal domain representation. Route handlers
map between the two.

Request fields default to "" (or None) rather than being required: a missing
field is reported by the domain validators as part of the 400 field map,
instead of failing earlier with a schema error.

AccountResponse has no password field of any kind. It is built from
PublicAccount, which has none either.
"""

from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from auth.models import AuthResult, PublicAccount
from blog.models import PageInfo, Post

# ---------------------------------------------------------------------------
# Auth -- request models
# ---------------------------------------------------------------------------


class RegisterRequest(BaseModel):
    """Request body for POST /api/v1/auth/register.

    Accepts the web client's camelCase confirmPassword as well as snake_case.
    """

    model_config = ConfigDict(populate_by_name=True)

    username: str = Field(default="", max_length=255)
    email: str = Field(default="", max_length=320)
    password: str = Field(default="", max_length=1024)
    confirm_password: str = Field(
        default="",
        max_length=1024,
        validation_alias=AliasChoices("confirmPassword", "confirm_password"),
    )


class LoginRequest(BaseModel):
    """Request body for POST /api/v1/auth/login. The identifier may be a username or an email."""

    model_config = ConfigDict(populate_by_name=True)

    username_or_email: str = Field(
        default="",
        max_length=320,
        validation_alias=AliasChoices("usernameOrEmail", "username_or_email", "username", "email"),
    )
    password: str = Field(default="", max_length=1024)


# ---------------------------------------------------------------------------
# Auth -- response models
# ---------------------------------------------------------------------------


class AccountResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    username: str
    email: str
    created_at: str

    @classmethod
    def from_account(cls, account: PublicAccount) -> "AccountResponse":
        return cls(
            id=account.id,
            username=account.username,
            email=account.email,
            created_at=account.created_at,
        )


class AuthResponse(BaseModel):
    """Response for register and login: the account plus its bearer token."""

    model_config = ConfigDict(frozen=True)

    account: AccountResponse
    token: str
    token_type: str = "bearer"
    expires_in: int

    @classmethod
    def from_result(cls, result: AuthResult) -> "AuthResponse":
        return cls(
            account=AccountResponse.from_account(result.account),
            token=result.token,
            expires_in=result.expires_in,
        )


class MessageResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    message: str


class VerifyResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    valid: bool = True


# ---------------------------------------------------------------------------
# Blog -- request models
# ---------------------------------------------------------------------------


class PostCreate(BaseModel):
    """Request body for POST /api/v1/posts. The author is the caller, never a body field."""

    title: str = ""
    description: str = ""
    content: str = ""


class PostUpdate(BaseModel):
    """Request body for PUT /api/v1/posts/{post_id}. Omitted fields are left unchanged."""

    title: Optional[str] = None
    description: Optional[str] = None
    content: Optional[str] = None


# ---------------------------------------------------------------------------
# Blog -- response models
# ---------------------------------------------------------------------------


class PostResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    author_id: str
    author_username: Optional[str]
    title: str
    description: str
    content: str
    created_at: str
    updated_at: str

    @classmethod
    def from_post(cls, post: Post, author_username: Optional[str]) -> "PostResponse":
        return cls(
            id=post.id or "",
            author_id=post.author_id,
            author_username=author_username,
            title=post.title,
            description=post.description,
            content=post.content,
            created_at=post.created_at,
            updated_at=post.updated_at,
        )


class Pagination(BaseModel):
    model_config = ConfigDict(frozen=True)

    page: int
    limit: int
    total: int
    pages: int
    has_next: bool
    has_prev: bool

    @classmethod
    def from_page(cls, info: PageInfo) -> "Pagination":
        return cls(
            page=info.page,
            limit=info.limit,
            total=info.total,
            pages=info.pages,
            has_next=info.has_next,
            has_prev=info.has_prev,
        )


class PostListResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    items: list[PostResponse]
    pagination: Pagination


# ---------------------------------------------------------------------------
# Errors and health
# ---------------------------------------------------------------------------


class ErrorDetail(BaseModel):
    """Machine-readable error payload. fields maps input field -> message."""

    model_config = ConfigDict(frozen=True)

    code: str
    message: str
    detail: Optional[str] = None
    fields: Optional[dict[str, str]] = None


class ErrorResponse(BaseModel):
    """Top-level error envelope returned on 4xx/5xx responses."""

    model_config = ConfigDict(frozen=True)

    error: ErrorDetail


class HealthResponse(BaseModel):
    """Response for GET /api/v1/health."""

    model_config = ConfigDict(frozen=True)

    status: str = "healthy"
    version: str
    components: dict[str, str] = Field(default_factory=dict)
