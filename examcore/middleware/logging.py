import logging
import time
import uuid
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Tags each request with an id and logs caller, outcome and latency.

    Engine rejections (4xx) are logged at WARNING so a burst of late submits
    or duplicate starts stands out from normal traffic.
    """

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
        request.state.request_id = request_id
        caller = f"{request.headers.get('X-User-Role', 'anonymous')}:{request.headers.get('X-User-Id', '-')}"
        extra = {"request_id": request_id, "caller": caller, "method": request.method, "path": request.url.path}

        started = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            extra["duration_ms"] = round((time.perf_counter() - started) * 1000, 2)
            logger.exception(f"[{request_id}] {caller} {request.method} {request.url.path} failed", extra=extra)
            raise

        extra["duration_ms"] = round((time.perf_counter() - started) * 1000, 2)
        extra["status_code"] = response.status_code
        level = logging.WARNING if response.status_code >= 400 else logging.INFO
        logger.log(
            level,
            f"[{request_id}] {caller} {request.method} {request.url.path} -> {response.status_code} in {extra['duration_ms']}ms",
            extra=extra,
        )
        response.headers["X-Request-ID"] = request_id
        return response
