"""
Per-client request limits for SafeKey.

Every route shares RATE_LIMIT_DEFAULT. Sign-in style routes and provider
validation, which spends the user's provider quota, carry their own
stricter limits through the decorators at the bottom of this module.
"""
import logging
from fastapi import FastAPI, Request
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address
from app.config import settings
from app.core.logging_utils import sanitize_log_message

logger = logging.getLogger(__name__)


def get_client_ip(request: Request) -> str:
    """Client address, preferring the left-most X-Forwarded-For entry set by the proxy."""
    forwarded = request.headers.get("X-Forwarded-For", "")
    client = forwarded.split(",")[0].strip()
    return client or get_remote_address(request)


limiter = Limiter(
    key_func=get_client_ip,
    default_limits=[settings.RATE_LIMIT_DEFAULT],
    storage_uri=settings.RATE_LIMIT_STORAGE_URI,
    enabled=settings.RATE_LIMIT_ENABLED
)


def _limit_exceeded(request: Request, exc: RateLimitExceeded):
    logger.warning(
        sanitize_log_message(
            "Rate limit exceeded",
            Path=request.url.path,
            ClientIP=get_client_ip(request),
            Limit=str(exc.detail),
            RequestID=getattr(request.state, "request_id", None)
        )
    )
    return _rate_limit_exceeded_handler(request, exc)


def setup_rate_limiting(app: FastAPI) -> None:
    """Attach the shared limiter, its 429 handler and the slowapi middleware."""
    if not settings.RATE_LIMIT_ENABLED:
        logger.info("Rate limiting is disabled")
        return

    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _limit_exceeded)
    app.add_middleware(SlowAPIMiddleware)

    logger.info(
        f"Rate limiting enabled: default={settings.RATE_LIMIT_DEFAULT}, "
        f"auth={settings.RATE_LIMIT_AUTH}, validation={settings.RATE_LIMIT_VALIDATION}"
    )


def rate_limit_auth():
    """Limit for signup, signin and the demo account."""
    return limiter.limit(settings.RATE_LIMIT_AUTH)


def rate_limit_validation():
    """Limit for provider key validation."""
    return limiter.limit(settings.RATE_LIMIT_VALIDATION)
