"""
Rate limiting middleware.

The public RSVP endpoints are reachable by anyone holding a link, so
they are rate limited per client address.
"""

import logging
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from core.config import get_settings

logger = logging.getLogger(__name__)
settings = get_settings()

# Initialize limiter
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=["1000/minute"],
    storage_uri=settings.RATE_LIMIT_STORAGE_URI,
    strategy="fixed-window",
    enabled=settings.RATE_LIMIT_ENABLED,
)

RSVP_RATE_LIMIT = settings.RSVP_RATE_LIMIT


def setup_rate_limiting(app):
    """
    Setup rate limiting for FastAPI app.

    Args:
        app: FastAPI application instance
    """
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    logger.info(f"Rate limiting configured (enabled={settings.RATE_LIMIT_ENABLED})")
