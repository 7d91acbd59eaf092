"""API middleware for logging, rate limiting, and error handling."""
import math
import time
import uuid
from collections import deque
from typing import Callable, Deque, Dict, Optional

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from ..core.exceptions import RateLimitExceeded
from ..core.logging import RequestLogger, SecurityLogger
from ..config import settings
from .error_handling import error_response


def client_ip(request: Request) -> str:
    return request.client.host if request.client else "unknown"


class SlidingWindowCounter:
    """In-memory per-key request log over a sliding time window.

    Keys with no request inside the window are swept at most once per
    window.
    """

    def __init__(
        self,
        max_requests: int,
        window_seconds: float,
        clock: Callable[[], float] = time.monotonic
    ):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.clock = clock
        self._hits: Dict[str, Deque[float]] = {}
        self._last_sweep = clock()

    def __len__(self) -> int:
        return len(self._hits)

    def hit(self, key: str) -> Optional[int]:
        """Record a request for key.

        Returns ``None`` when allowed, otherwise the number of seconds
        until the oldest request leaves the window.
        """
        now = self.clock()
        if now - self._last_sweep >= self.window_seconds:
            self._sweep(now)

        hits = self._hits.setdefault(key, deque())
        while hits and now - hits[0] >= self.window_seconds:
            hits.popleft()

        if len(hits) >= self.max_requests:
            return max(1, math.ceil(self.window_seconds - (now - hits[0])))

        hits.append(now)
        return None

    def _sweep(self, now: float) -> None:
        stale = [
            key for key, hits in self._hits.items()
            if not hits or now - hits[-1] >= self.window_seconds
        ]
        for key in stale:
            del self._hits[key]
        self._last_sweep = now

    def reset(self) -> None:
        self._hits.clear()
        self._last_sweep = self.clock()


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Middleware for logging requests and responses."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        # Generate request ID
        request_id = str(uuid.uuid4())
        request.state.request_id = request_id

        # Log request
        start_time = time.time()
        RequestLogger.log_request(
            method=request.method,
            path=str(request.url.path),
            request_id=request_id,
            extra_data={
                "client_ip": client_ip(request),
                "user_agent": request.headers.get("user-agent")
            }
        )

        # Process request
        response = await call_next(request)

        # Calculate response time
        response_time_ms = (time.time() - start_time) * 1000

        # Set by the auth dependency on authenticated routes
        user_id = getattr(request.state, "user_id", None)

        # Log response
        RequestLogger.log_response(
            method=request.method,
            path=str(request.url.path),
            status_code=response.status_code,
            response_time_ms=response_time_ms,
            user_id=user_id,
            request_id=request_id
        )

        # Add request ID to response headers
        response.headers["X-Request-ID"] = request_id

        return response


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """Turns exceptions no handler claimed into a logged 500 envelope."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        try:
            return await call_next(request)

        except Exception as e:
            RequestLogger.log_unhandled_error(
                method=request.method,
                path=str(request.url.path),
                error=e,
                request_id=getattr(request.state, "request_id", None)
            )
            return error_response(
                status_code=500,
                message="Internal Server Error",
                error_code="INTERNAL_ERROR",
                details={"error": str(e)} if settings.debug else None
            )


class RateLimitingMiddleware(BaseHTTPMiddleware):
    """Global per-IP request budget."""

    def __init__(self, app, requests_per_window: int = 100, window_seconds: int = 60):
        super().__init__(app)
        self.counter = SlidingWindowCounter(requests_per_window, window_seconds)

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if not settings.api.rate_limit_enabled:
            return await call_next(request)

        ip_address = client_ip(request)
        retry_after = self.counter.hit(ip_address)
        if retry_after is not None:
            SecurityLogger.log_rate_limit_exceeded(
                ip_address=ip_address,
                path=str(request.url.path)
            )
            return error_response(
                status_code=429,
                message="Too many requests, please try again later.",
                error_code="RATE_LIMIT_EXCEEDED",
                headers={"Retry-After": str(retry_after)}
            )

        return await call_next(request)


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add security headers to responses."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)

        # Add security headers
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["X-XSS-Protection"] = "1; mode=block"
        response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"

        return response


class RateLimiter:
    """Per-route rate limit dependency, keyed by client IP.

    Usage: ``dependencies=[Depends(limiter)]`` on the route.
    """

    def __init__(
        self,
        max_requests: int,
        window_seconds: float,
        name: str = "route",
        clock: Callable[[], float] = time.monotonic
    ):
        self.name = name
        self.counter = SlidingWindowCounter(max_requests, window_seconds, clock=clock)

    async def __call__(self, request: Request) -> None:
        ip_address = client_ip(request)
        retry_after = self.counter.hit(ip_address)
        if retry_after is not None:
            SecurityLogger.log_rate_limit_exceeded(
                ip_address=ip_address,
                path=str(request.url.path),
                limit_type=self.name
            )
            raise RateLimitExceeded(retry_after=retry_after)

    def reset(self) -> None:
        self.counter.reset()


forgot_password_limiter = RateLimiter(
    max_requests=settings.auth.forgot_password_max_attempts,
    window_seconds=settings.auth.forgot_password_window_seconds,
    name="forgot_password"
)
