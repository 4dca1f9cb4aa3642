"""
blog/models.py -- Domain dataclasses for blog posts.

Pure data containers with zero logic. Persistence lives in blog/store.py,
field rules in blog/validation.py.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass
class Post:
    """A published blog post.

    author_id references an account by id. The post does not own the
    account and the account does not own the post; deleting one leaves the
    other untouched.

    id is None before the record is written to the database.
    """

    author_id: str
    title: str
    description: str
    content: str
    id: Optional[str] = None
    created_at: str = ""  # ISO 8601, set by store on insert
    updated_at: str = ""  # ISO 8601, bumped by store on every update


@dataclass(frozen=True)
class PageInfo:
    """Pagination metadata for a list of posts. page is 1-based."""

    page: int
    limit: int
    total: int

    @property
    def pages(self) -> int:
        return (self.total + self.limit - 1) // self.limit if self.limit else 0

    @property
    def has_next(self) -> bool:
        return self.page * self.limit < self.total

    @property
    def has_prev(self) -> bool:
        return self.page > 1
