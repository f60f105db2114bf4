"""
Request logging middleware.

Tags every request with a short id, logs its method, path, status and
duration, and echoes the id back in the ``X-Request-ID`` header.
"""

import logging
import time
import uuid
from contextvars import ContextVar

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

REQUEST_ID_HEADER = "X-Request-ID"

request_id_ctx: ContextVar[str] = ContextVar("request_id", default="")

logger = logging.getLogger(__name__)


def get_request_id() -> str:
    """Id of the request being handled, or an empty string outside one."""
    return request_id_ctx.get()


def new_request_id(request: Request) -> str:
    """Reuse a caller supplied id when present, otherwise mint a short one."""
    supplied = request.headers.get(REQUEST_ID_HEADER, "").strip()
    return supplied[:64] if supplied else uuid.uuid4().hex[:8]


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log each request and attach its id to the response."""

    async def dispatch(self, request: Request, call_next) -> Response:
        req_id = new_request_id(request)
        token = request_id_ctx.set(req_id)
        started = time.perf_counter()

        logger.info(
            f"[{req_id}] {request.method} {request.url.path}",
            extra={"request_id": req_id, "query": str(request.query_params)},
        )

        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(
                f"[{req_id}] {request.method} {request.url.path} failed after "
                f"{(time.perf_counter() - started) * 1000:.0f}ms: {e}",
                exc_info=True,
            )
            raise
        finally:
            request_id_ctx.reset(token)

        elapsed_ms = (time.perf_counter() - started) * 1000
        level = logging.WARNING if response.status_code >= 500 else logging.INFO
        logger.log(level, f"[{req_id}] {response.status_code} in {elapsed_ms:.0f}ms")

        response.headers[REQUEST_ID_HEADER] = req_id
        return response
