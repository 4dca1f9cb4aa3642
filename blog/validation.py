"""
blog/validation.py -- Field rules for blog post payloads.

validate_post() is used on create (every field required); validate_post_update()
on edit (only supplied fields are checked, at least one must be supplied).
Both return a field-keyed message map; empty means valid. Lengths are
measured after stripping surrounding whitespace.
"""

from __future__ import annotations

import re
from typing import Optional

from core.errors import InvalidId

TITLE_MIN, TITLE_MAX = 3, 200
DESCRIPTION_MIN, DESCRIPTION_MAX = 10, 500
CONTENT_MIN = 50

EDITABLE_FIELDS = ("title", "description", "content")


def _check_title(value: str) -> Optional[str]:
    n = len(value.strip())
    if n < TITLE_MIN:
        return f"Title must be at least {TITLE_MIN} characters long"
    if n > TITLE_MAX:
        return f"Title must not exceed {TITLE_MAX} characters"
    return None


def _check_description(value: str) -> Optional[str]:
    n = len(value.strip())
    if n < DESCRIPTION_MIN:
        return f"Description must be at least {DESCRIPTION_MIN} characters long"
    if n > DESCRIPTION_MAX:
        return f"Description must not exceed {DESCRIPTION_MAX} characters"
    return None


def _check_content(value: str) -> Optional[str]:
    if len(value.strip()) < CONTENT_MIN:
        return f"Content must be at least {CONTENT_MIN} characters long"
    return None


_CHECKS = {
    "title": _check_title,
    "description": _check_description,
    "content": _check_content,
}


def validate_post(data: dict) -> dict[str, str]:
    errors: dict[str, str] = {}
    for field, check in _CHECKS.items():
        value = data.get(field)
        if not isinstance(value, str) or not value.strip():
            errors[field] = f"{field.capitalize()} is required"
            continue
        message = check(value)
        if message:
            errors[field] = message
    return errors


def validate_post_update(data: dict) -> dict[str, str]:
    supplied = {k: v for k, v in data.items() if k in EDITABLE_FIELDS and v is not None}
    if not supplied:
        return {"post": "Provide at least one of title, description or content"}
    errors: dict[str, str] = {}
    for field, value in supplied.items():
        if not isinstance(value, str):
            errors[field] = f"{field.capitalize()} must be a string"
            continue
        message = _CHECKS[field](value)
        if message:
            errors[field] = message
    return errors


POST_ID_PATTERN = re.compile(r"^[0-9a-f]{24}$")


def check_post_id(post_id: str) -> str:
    """Return post_id unchanged, or raise InvalidId if it is malformed."""
    if not POST_ID_PATTERN.match(post_id):
        raise InvalidId("Invalid post ID format.")
    return post_id
