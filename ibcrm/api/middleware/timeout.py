"""Request timeout middleware."""

import asyncio
import logging
from typing import Callable

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.status import HTTP_504_GATEWAY_TIMEOUT

from ibcrm.api.middleware.error_handler import create_error_response

logger = logging.getLogger(__name__)


class RequestTimeoutMiddleware(BaseHTTPMiddleware):
    """Abort requests that run longer than ``timeout_seconds`` with a 504."""

    def __init__(self, app, timeout_seconds: float = 30.0):
        super().__init__(app)
        self.timeout_seconds = timeout_seconds

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        try:
            return await asyncio.wait_for(call_next(request), timeout=self.timeout_seconds)
        except asyncio.TimeoutError:
            request_id = getattr(request.state, "request_id", "") or ""
            logger.error(
                f"Request timed out after {self.timeout_seconds}s: "
                f"{request.method} {request.url.path}",
                extra={"request_id": request_id, "path": request.url.path},
            )
            return JSONResponse(
                status_code=HTTP_504_GATEWAY_TIMEOUT,
                content=create_error_response(
                    request_id=request_id,
                    error_code="REQUEST_TIMEOUT",
                    message="Request timeout",
                ),
            )
