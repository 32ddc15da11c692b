"""Rate limiting configuration using slowapi.

A module-level Limiter applied to every route through ``SlowAPIMiddleware``
in main.py; individual routes can still override with
``@limiter.limit("N/period")``.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

from hrms.config import settings

limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[settings.RATE_LIMIT_DEFAULT],
    enabled=settings.RATE_LIMIT_ENABLED,
)
