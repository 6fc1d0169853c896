# =============================================================================
# app/middleware.py - Request Logging Middleware
# =============================================================================
# One access-log line per request, tagged with a request id that is echoed
# back in the X-Request-Id header. Routes marked with dont_log (e.g. /health)
# are skipped. Exceptions no handler claimed are translated here as well.
# =============================================================================

import logging
import time

from fastapi import Request

from app.context import ensure_request_id, set_request_id
from app.exceptions import error_handler

REQUEST_ID_HEADER = "X-Request-Id"

http_log = logging.getLogger("app.http")


async def log_requests(request: Request, call_next):
    """HTTP middleware: request id, timing and access log."""
    rid = ensure_request_id(request.headers.get(REQUEST_ID_HEADER))
    request.state.request_id = rid

    start = time.perf_counter()
    response = None
    try:
        try:
            response = await call_next(request)
        except Exception as exc:
            # Unclaimed errors: the 500 still gets the request id and CORS headers
            response = await error_handler(request, exc)
        response.headers[REQUEST_ID_HEADER] = rid
        return response
    finally:
        duration_ms = int((time.perf_counter() - start) * 1000)

        if not getattr(request.state, "dont_log", False):
            slow_ms = request.app.state.settings.SLOW_REQUEST_MS
            level = logging.WARNING if duration_ms >= slow_ms else logging.INFO
            status_code = response.status_code if response is not None else 500
            app_name = getattr(request.state, "app_name", None) or "-"
            http_log.log(
                level,
                f"{request.method} {request.url.path} {status_code} {duration_ms}ms app={app_name}",
            )

        set_request_id(None)
