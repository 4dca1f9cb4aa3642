"""
auth/passwords.py -- Password hashing (bcrypt, direct usage).

bcrypt is the right choice for low-entropy secrets because its cost factor
makes brute force expensive. The digest is self-describing: algorithm, cost
and salt are embedded, so verification needs nothing but the stored string.

Using bcrypt directly rather than passlib[bcrypt]: passlib's wrap-bug probe
builds a password longer than 72 bytes, which bcrypt 4.x rejects. Passwords
longer than 72 bytes are refused at validation time (auth/validation.py)
instead of being silently truncated.

Layer rule: no imports from api/ or blog/.
"""

from __future__ import annotations

import bcrypt

BCRYPT_ROUNDS = 12


def hash_password(plain: str) -> str:
    """Return a salted bcrypt digest of the given plaintext password."""
    return bcrypt.hashpw(plain.encode("utf-8"), bcrypt.gensalt(rounds=BCRYPT_ROUNDS)).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    """Return True if the plaintext password matches the bcrypt digest.

    A malformed digest or an over-long password is a mismatch, not an error.
    """
    try:
        return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))
    except (ValueError, TypeError):
        return False


# Timing equalization dummy hash.
# Computed once at import so the first login attempt is not measurably slower
# than later ones. AccountService.authenticate() checks against it when the
# account does not exist so an unknown username costs the same bcrypt work as
# a wrong password.
DUMMY_HASH: str = hash_password("inkwell_timing_dummy")
