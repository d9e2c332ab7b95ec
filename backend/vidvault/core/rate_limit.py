# vidvault/core/rate_limit.py
"""
Per-source request limits (slowapi).
Routes opt into tighter limits with `@limiter.limit(...)`; everything else gets
`settings.rate_limit_default` through SlowAPIMiddleware.
"""
from slowapi import Limiter
from slowapi.util import get_remote_address

from vidvault.config import settings

REQUEST_TOKEN_LIMIT = "5/5minutes"
VALIDATE_TOKEN_LIMIT = "10/5minutes"

limiter = Limiter(key_func=get_remote_address, default_limits=[settings.rate_limit_default])
