"""
api/limiter.py -- Per-client rate limiting for the credential endpoints.

One Limiter for the whole app. api/main.py mounts it as middleware and
api/routes/v1/auth.py decorates register and login with it; the limit
strings themselves come from Settings so they can be tuned per deployment.

Counters live in RATE_LIMIT_STORAGE_URI ("memory://" by default, which is
per-process). Tests switch the limiter off with limiter.enabled = False.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

from core.config import get_settings

limiter = Limiter(
    key_func=get_remote_address,
    storage_uri=get_settings().rate_limit_storage_uri,
)
