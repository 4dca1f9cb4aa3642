"""
auth/validation.py -- Shape checks for registration and login payloads.

Each validator returns a field-keyed message map; an empty map means the
payload is acceptable. AccountService raises ValidationError with the map so
the client gets every problem at once instead of one per round trip.

These checks run before any store access or hashing. No partial writes.
"""

from __future__ import annotations

import re

USERNAME_MIN = 3
USERNAME_MAX = 30
EMAIL_MAX = 255
PASSWORD_MIN = 8
# bcrypt only reads the first 72 bytes; longer secrets are refused rather
# than silently truncated.
PASSWORD_MAX_BYTES = 72

EMAIL_PATTERN = re.compile(r"^[\w.+-]+@[\w-]+(\.[\w-]+)*\.[A-Za-z]{2,}$")


def validate_registration(username: str, email: str, password: str, confirm_password: str) -> dict[str, str]:
    errors: dict[str, str] = {}

    name = (username or "").strip()
    if len(name) < USERNAME_MIN:
        errors["username"] = f"Username must be at least {USERNAME_MIN} characters"
    elif len(name) > USERNAME_MAX:
        errors["username"] = f"Username cannot exceed {USERNAME_MAX} characters"
    elif "@" in name:
        # "@" marks a login identifier as an email address in AccountStore.get_by_login.
        errors["username"] = "Username cannot contain @"

    address = (email or "").strip()
    if not address or len(address) > EMAIL_MAX or not EMAIL_PATTERN.match(address):
        errors["email"] = "Please enter a valid email"

    if not password or len(password) < PASSWORD_MIN:
        errors["password"] = f"Password must be at least {PASSWORD_MIN} characters"
    elif len(password.encode("utf-8")) > PASSWORD_MAX_BYTES:
        errors["password"] = f"Password cannot exceed {PASSWORD_MAX_BYTES} bytes"

    if password != confirm_password:
        errors["confirmPassword"] = "Passwords don't match"

    return errors


def validate_login(username_or_email: str, password: str) -> dict[str, str]:
    errors: dict[str, str] = {}
    if not (username_or_email or "").strip():
        errors["usernameOrEmail"] = "Username or email is required"
    if not password:
        errors["password"] = "Password is required"
    return errors
