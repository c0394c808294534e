"""Request logging middleware.

Logs every status-API request with method, path, status code, latency, whether
a rebalance was in flight when the response went out, and a short request ID.
The request_id is also injected into request.state so router handlers can
include it in ApiResponse.

Log format:
    INFO [POST] /api/v1/chain/rebalance → 200 (812ms) adjusting=no req_a1b2c3d4e5f6
"""

import logging
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger("dlmm.request")


def _rebalance_in_flight(request: Request) -> bool:
    manager = getattr(request.app.state, "manager", None)
    coordinator = getattr(manager, "coordinator", None)
    return getattr(coordinator, "adjusting", False) is True


class RequestLogMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request.state.request_id = f"req_{uuid.uuid4().hex[:12]}"

        start = time.perf_counter()
        response: Response = await call_next(request)
        elapsed_ms = (time.perf_counter() - start) * 1000

        logger.info(
            "[%s] %s → %d (%.0fms) adjusting=%s %s",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
            "yes" if _rebalance_in_flight(request) else "no",
            request.state.request_id,
        )
        return response
