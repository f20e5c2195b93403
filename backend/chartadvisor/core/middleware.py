"""
Request middleware: correlation IDs, timing and timeouts.
"""
import asyncio
import uuid
import logging
import time
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from fastapi import status
from fastapi.responses import JSONResponse
from chartadvisor.core.errors import ErrorCodes, get_error_response
from chartadvisor.core.performance import PerformanceMonitor

logger = logging.getLogger(__name__)

CORRELATION_HEADER = "X-Correlation-ID"


def error_json(error_code: str, status_code: int, correlation_id: str) -> JSONResponse:
    """Structured error body carrying the correlation ID in body and header."""
    error_info = get_error_response(error_code)
    error_info['correlation_id'] = correlation_id
    return JSONResponse(
        status_code=status_code,
        content=error_info,
        headers={CORRELATION_HEADER: correlation_id}
    )


def _tag_log_records(correlation_id: str):
    """Stamp every log record created from now on; returns the previous factory."""
    previous = logging.getLogRecordFactory()

    def factory(*args, **kwargs):
        record = previous(*args, **kwargs)
        record.correlation_id = correlation_id
        return record

    logging.setLogRecordFactory(factory)
    return previous


class CorrelationIDMiddleware(BaseHTTPMiddleware):
    """
    Trace each request end to end.

    Reuses the caller's X-Correlation-ID or generates one, tags log records
    with it, echoes it on the response with X-Response-Time, and records a
    ``request_duration`` sample. Unhandled errors become a 500 UNKNOWN_ERROR.
    """

    async def dispatch(self, request: Request, call_next):
        correlation_id = request.headers.get(CORRELATION_HEADER) or str(uuid.uuid4())
        request.state.correlation_id = correlation_id
        previous_factory = _tag_log_records(correlation_id)
        route = {"method": request.method, "path": request.url.path}

        started = time.perf_counter()
        logger.debug(f"{request.method} {request.url.path} started", extra=route)
        try:
            response = await call_next(request)
        except Exception as e:
            duration = time.perf_counter() - started
            logger.error(
                f"{request.method} {request.url.path} failed after {duration:.3f}s: {e}",
                extra={**route, "duration": duration},
                exc_info=True
            )
            return error_json(ErrorCodes.UNKNOWN_ERROR, status.HTTP_500_INTERNAL_SERVER_ERROR, correlation_id)
        finally:
            logging.setLogRecordFactory(previous_factory)

        duration = time.perf_counter() - started
        PerformanceMonitor.record_metric(
            "request_duration",
            duration,
            {"correlation_id": correlation_id, "status_code": response.status_code, **route}
        )
        response.headers[CORRELATION_HEADER] = correlation_id
        response.headers["X-Response-Time"] = f"{duration:.3f}"
        logger.info(
            f"{request.method} {request.url.path} -> {response.status_code} in {duration:.3f}s",
            extra={**route, "status_code": response.status_code, "duration": duration}
        )
        return response


class TimeoutMiddleware(BaseHTTPMiddleware):
    """Abort requests that run longer than ``timeout_seconds`` with a 504."""

    def __init__(self, app, timeout_seconds: float):
        super().__init__(app)
        self.timeout_seconds = timeout_seconds

    async def dispatch(self, request: Request, call_next):
        try:
            return await asyncio.wait_for(call_next(request), timeout=self.timeout_seconds)
        except asyncio.TimeoutError:
            logger.error(f"{request.method} {request.url.path} timed out after {self.timeout_seconds}s")
            correlation_id = getattr(request.state, 'correlation_id', 'unknown')
            return error_json(ErrorCodes.TIMEOUT, status.HTTP_504_GATEWAY_TIMEOUT, correlation_id)
