"""Per-client request limits.

Every ``/api`` request counts against a shared per-IP budget. API key
creation and rotation carry a much smaller budget of their own. Counters live
in process memory.
"""

from fastapi import Request
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from hr_compliance.config import get_settings

_settings = get_settings()

limiter = Limiter(
    key_func=get_remote_address,
    application_limits=[_settings.api_rate_limit],
    enabled=_settings.rate_limit_enabled,
)

# Creation and rotation draw on one budget per client
key_management_limit = limiter.shared_limit(
    _settings.api_key_management_rate_limit,
    scope="api-key-management",
    error_message="Too many API key requests, please try again later",
)


def request_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """Render a 429 for an exhausted per-client budget."""
    # slowapi's middleware calls this without awaiting
    message = (
        exc.detail
        if exc.limit.error_message
        else "Too many requests, please try again later"
    )
    return JSONResponse(status_code=429, content={"error": message})
