import time
import uuid
from typing import Callable

import structlog
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

logger = structlog.get_logger()

# Probes hit these constantly; only failures are worth a log line.
QUIET_PATHS = frozenset({"/api/v1/health"})


class StructuredLoggingMiddleware(BaseHTTPMiddleware):
    """Binds request/trace IDs to the log context and records request latency."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        trace_id = request.headers.get("X-Trace-ID") or request_id

        request.state.request_id = request_id
        request.state.trace_id = trace_id

        log = logger.bind(
            request_id=request_id,
            trace_id=trace_id,
            method=request.method,
            path=request.url.path,
            client_host=request.client.host if request.client else None,
        )
        quiet = request.url.path in QUIET_PATHS

        start = time.perf_counter()
        if not quiet:
            log.info("request_started")

        try:
            response = await call_next(request)
        except Exception as exc:
            log.error(
                "request_failed",
                error=str(exc),
                error_type=type(exc).__name__,
                process_time_ms=round((time.perf_counter() - start) * 1000, 2),
                exc_info=True,
            )
            raise

        elapsed_ms = round((time.perf_counter() - start) * 1000, 2)
        if response.status_code >= 500:
            log.error("request_completed", status_code=response.status_code, process_time_ms=elapsed_ms)
        elif response.status_code >= 400:
            log.warning("request_completed", status_code=response.status_code, process_time_ms=elapsed_ms)
        elif not quiet:
            log.info("request_completed", status_code=response.status_code, process_time_ms=elapsed_ms)

        response.headers["X-Request-ID"] = request_id
        response.headers["X-Trace-ID"] = trace_id
        return response
