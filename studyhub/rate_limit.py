"""
Shared rate limiter.

Routers decorate expensive endpoints with ``@limiter.limit(...)``; the app
factory registers the same instance on ``app.state.limiter`` and switches
it off when the app is built in testing mode.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

from .config import settings

UPLOAD_RATE_LIMIT = "10/minute"
GENERATION_RATE_LIMIT = "10/minute"

limiter = Limiter(key_func=get_remote_address, enabled=not settings.testing)
