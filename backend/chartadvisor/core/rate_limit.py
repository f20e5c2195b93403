"""
Per-client rate limiting for the engine endpoints (slowapi).
"""
import logging
from fastapi import Request
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from chartadvisor.core.config import get_settings
from chartadvisor.core.errors import ErrorCodes, get_error_response

logger = logging.getLogger(__name__)

limiter = Limiter(key_func=get_remote_address)


def engine_rate_limit() -> str:
    """Limit string read at request time so reloaded settings take effect."""
    return f"{get_settings().rate_limit_per_minute}/minute"


def rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """Handle rate limit exceeded with structured error response."""
    correlation_id = getattr(request.state, 'correlation_id', 'unknown')
    logger.info(f"Rate limit exceeded for {get_remote_address(request)} on {request.url.path}")
    error_info = get_error_response(ErrorCodes.RATE_LIMIT_EXCEEDED)
    error_info['correlation_id'] = correlation_id
    return JSONResponse(
        status_code=429,
        content=error_info,
        headers={
            "Retry-After": str(getattr(exc, 'retry_after', None) or 60),
            "X-Correlation-ID": correlation_id
        }
    )
