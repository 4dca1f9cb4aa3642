"""
blog/store.py -- SQLAlchemy-backed persistence layer for blog posts.

Uses SQLAlchemy Core (not ORM) so the dataclasses in blog/models.py remain the
authoritative domain representation. Swapping SQLite for PostgreSQL is a
connection string change.

Pattern: Repository + Data Mapper. PostStore is the repository; _row_to_post
is the mapper. Route handlers never touch SQL directly.

Security: all queries use bound parameters. No f-strings in SQL.

Usage:
    store = PostStore("sqlite:///inkwell.db")
    post = store.create_post(Post(author_id=aid, title=..., description=..., content=...))
    posts, total = store.list_posts(page=1, limit=10)
    store.update_post(post.id, title="New title")
    store.delete_post(post.id)
    store.close()
"""

import logging
import secrets
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import Column, Index, MetaData, String, Table, Text, create_engine, event, func, select
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import OperationalError

from blog.models import Post
from core.errors import StoreUnavailable

logger = logging.getLogger("inkwell.blog")

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

metadata = MetaData()

_posts = Table(
    "posts",
    metadata,
    Column("id", String(24), primary_key=True),
    Column("author_id", String(24), nullable=False),
    Column("title", String(200), nullable=False),
    Column("description", String(500), nullable=False),
    Column("content", Text, nullable=False),
    Column("created_at", String(32), nullable=False),
    Column("updated_at", String(32), nullable=False),
    Index("ix_posts_author_id", "author_id"),
    Index("ix_posts_created_at", "created_at"),
)

_UPDATABLE = {"title", "description", "content"}


def _set_wal_mode(dbapi_conn, connection_record) -> None:
    dbapi_conn.execute("PRAGMA journal_mode=WAL")


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class PostStore:
    def __init__(self, db_url: str) -> None:
        connect_args: dict = {}
        if db_url.startswith("sqlite"):
            connect_args["check_same_thread"] = False
        self.engine: Engine = create_engine(db_url, connect_args=connect_args)
        if db_url.startswith("sqlite"):
            event.listen(self.engine, "connect", _set_wal_mode)
        metadata.create_all(self.engine)

    @contextmanager
    def _connect(self) -> Iterator[Connection]:
        try:
            with self.engine.connect() as conn:
                yield conn
        except OperationalError as exc:
            logger.error("Post store unavailable: %s", exc)
            raise StoreUnavailable() from exc

    def create_post(self, post: Post) -> Post:
        """Insert a post and return it with id and timestamps assigned.

        Text fields are stored stripped of surrounding whitespace.
        """
        now = _now_iso()
        created = Post(
            id=secrets.token_hex(12),
            author_id=post.author_id,
            title=post.title.strip(),
            description=post.description.strip(),
            content=post.content.strip(),
            created_at=now,
            updated_at=now,
        )
        with self._connect() as conn:
            conn.execute(
                _posts.insert().values(
                    id=created.id,
                    author_id=created.author_id,
                    title=created.title,
                    description=created.description,
                    content=created.content,
                    created_at=created.created_at,
                    updated_at=created.updated_at,
                )
            )
            conn.commit()
        return created

    def get_post(self, post_id: str) -> Optional[Post]:
        with self._connect() as conn:
            row = conn.execute(_posts.select().where(_posts.c.id == post_id)).fetchone()
        return _row_to_post(row) if row is not None else None

    def list_posts(self, page: int = 1, limit: int = 10, author_id: Optional[str] = None) -> tuple[list[Post], int]:
        """Return one page of posts, newest first, and the total match count.

        page is 1-based. author_id narrows both the page and the total.
        """
        query = _posts.select()
        count = select(func.count()).select_from(_posts)
        if author_id is not None:
            query = query.where(_posts.c.author_id == author_id)
            count = count.where(_posts.c.author_id == author_id)
        query = query.order_by(_posts.c.created_at.desc(), _posts.c.id.desc()).offset((page - 1) * limit).limit(limit)
        with self._connect() as conn:
            rows = conn.execute(query).fetchall()
            total = conn.execute(count).scalar() or 0
        return [_row_to_post(r) for r in rows], total

    def update_post(self, post_id: str, **fields) -> Optional[Post]:
        """Update title/description/content and bump updated_at.

        Returns the updated post, or None if post_id was not found.
        Unknown field names raise ValueError.
        """
        unknown = set(fields) - _UPDATABLE
        if unknown:
            raise ValueError(f"Unknown post fields: {unknown!r}")
        values = {k: v.strip() for k, v in fields.items()}
        values["updated_at"] = _now_iso()
        with self._connect() as conn:
            result = conn.execute(_posts.update().where(_posts.c.id == post_id).values(**values))
            conn.commit()
        if result.rowcount == 0:
            return None
        return self.get_post(post_id)

    def delete_post(self, post_id: str) -> bool:
        """Permanently delete a post. Returns True if deleted, False if not found."""
        with self._connect() as conn:
            result = conn.execute(_posts.delete().where(_posts.c.id == post_id))
            conn.commit()
        return result.rowcount > 0

    def close(self) -> None:
        self.engine.dispose()


def _row_to_post(row) -> Post:
    return Post(
        id=row.id,
        author_id=row.author_id,
        title=row.title,
        description=row.description,
        content=row.content,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )
