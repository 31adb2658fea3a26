"""Per-IP rate limiting for the credential endpoints."""

import logging
import random
import time
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Callable

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.status import HTTP_429_TOO_MANY_REQUESTS

from ibcrm.api.middleware.error_handler import create_error_response
from ibcrm.api.middleware.logging import client_ip
from ibcrm.shared.constants import (
    RATE_LIMIT_CLEANUP_MAX_AGE_SECONDS,
    RATE_LIMIT_CLEANUP_PROBABILITY,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RateLimitConfig:
    """Allowed requests per sliding window."""

    requests: int
    window_seconds: int


@dataclass
class RequestRecord:
    """Request timestamps seen for one IP on one endpoint."""

    timestamps: list[float] = field(default_factory=list)


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Sliding-window limiter keyed by client IP and endpoint.

    Only exact path matches are limited, so unrelated routes pass straight
    through. Rejected requests get a 429 with a ``Retry-After`` header.
    """

    DEFAULT_LIMITS: dict[str, RateLimitConfig] = {
        "/auth/signup": RateLimitConfig(requests=10, window_seconds=900),
        "/auth/login": RateLimitConfig(requests=10, window_seconds=900),
    }

    def __init__(
        self,
        app,
        limits: dict[str, RateLimitConfig] | None = None,
        enabled: bool = True,
    ):
        super().__init__(app)
        self.enabled = enabled
        self.limits = {**self.DEFAULT_LIMITS, **(limits or {})}
        self._records: dict[str, dict[str, RequestRecord]] = defaultdict(
            lambda: defaultdict(RequestRecord)
        )

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        config = self.limits.get(request.url.path) if self.enabled else None
        if config is None or request.method == "OPTIONS":
            return await call_next(request)

        ip = client_ip(request)
        allowed, retry_after = self._check(ip, request.url.path, config)
        if not allowed:
            logger.warning(
                f"Rate limit exceeded for IP {ip} on endpoint {request.url.path}",
                extra={"client_ip": ip, "path": request.url.path, "retry_after": retry_after},
            )
            return JSONResponse(
                status_code=HTTP_429_TOO_MANY_REQUESTS,
                content=create_error_response(
                    request_id=getattr(request.state, "request_id", "") or "",
                    error_code="RATE_LIMITED",
                    message="Too many requests, please try again later",
                    details={"retry_after": retry_after},
                ),
                headers={"Retry-After": str(retry_after)},
            )

        return await call_next(request)

    def _check(
        self, ip: str, endpoint: str, config: RateLimitConfig
    ) -> tuple[bool, int]:
        """Record the request if within limit.

        Returns:
            Tuple of (allowed, retry_after_seconds)
        """
        now = time.time()
        if random.random() < RATE_LIMIT_CLEANUP_PROBABILITY:
            self._cleanup(now)

        record = self._records[ip][endpoint]
        window_start = now - config.window_seconds
        record.timestamps = [ts for ts in record.timestamps if ts > window_start]

        if len(record.timestamps) >= config.requests:
            retry_after = record.timestamps[0] + config.window_seconds - now
            return False, max(1, int(retry_after) + 1)

        record.timestamps.append(now)
        return True, 0

    def _cleanup(self, now: float) -> None:
        """Drop records idle for longer than the cleanup age."""
        cutoff = now - RATE_LIMIT_CLEANUP_MAX_AGE_SECONDS
        for ip in list(self._records):
            endpoints = self._records[ip]
            for endpoint in list(endpoints):
                timestamps = endpoints[endpoint].timestamps
                if not timestamps or timestamps[-1] < cutoff:
                    del endpoints[endpoint]
            if not endpoints:
                del self._records[ip]
