"""API middleware: per-caller rate limiting."""

from __future__ import annotations

import time
from typing import TYPE_CHECKING

from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from pollbox.api.auth import bearer_token, resolve_identity
from pollbox.core.errors import ConfigError, UnauthorizedError

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from fastapi import Request, Response


def caller_key(request: Request) -> str:
    """Identify the caller: token subject when it verifies, else client IP."""
    try:
        secret = request.app.state.config.auth.jwt_secret
        identity = resolve_identity(bearer_token(request), secret)
    except (UnauthorizedError, ConfigError):
        # Authentication itself is enforced by the route dependency.
        ip_addr = request.client.host if request.client else "unknown"
        return f"ip:{ip_addr}"
    return f"user:{identity.id}"


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Per-caller rate limiting using sliding window."""

    def __init__(self, app: object, rate_limit: int = 60, window: int = 60) -> None:
        super().__init__(app)  # type: ignore[arg-type]
        self.rate_limit = rate_limit
        self.window = window
        self._requests: dict[str, list[float]] = {}
        self._last_sweep = time.monotonic()

    def _sweep(self, now: float) -> None:
        """Forget callers whose newest request has left the window."""
        if now - self._last_sweep < self.window:
            return
        self._last_sweep = now
        idle = [
            key_id
            for key_id, stamps in self._requests.items()
            if not stamps or now - stamps[-1] >= self.window
        ]
        for key_id in idle:
            del self._requests[key_id]

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        key_id = caller_key(request)

        now = time.monotonic()
        self._sweep(now)
        # Clean old entries
        recent = [t for t in self._requests.get(key_id, ()) if now - t < self.window]

        if len(recent) >= self.rate_limit:
            self._requests[key_id] = recent
            return JSONResponse(
                status_code=429,
                content={"detail": "Rate limit exceeded. Try again later."},
                headers={"Retry-After": str(self.window)},
            )

        recent.append(now)
        self._requests[key_id] = recent
        response = await call_next(request)

        remaining = self.rate_limit - len(recent)
        response.headers["X-RateLimit-Limit"] = str(self.rate_limit)
        response.headers["X-RateLimit-Remaining"] = str(remaining)
        response.headers["X-RateLimit-Key"] = key_id

        return response
