"""Rate limiting middleware for FastAPI.

Fixed-window, per-client limits keyed on a path prefix rule. The admin login
gets the tightest rule so the shared password cannot be brute forced.
State is kept in process memory.
"""

import re
import time
from dataclasses import dataclass, field
from typing import Iterable, Optional

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response


@dataclass
class RateLimitRule:
    """Allow ``requests`` per ``window_seconds`` on paths matching ``path_pattern``.

    A rule without a pattern is the fallback for every other path.
    """

    requests: int
    window_seconds: int
    path_pattern: Optional[str] = None
    _compiled: Optional[re.Pattern] = field(default=None, init=False, repr=False)

    def __post_init__(self):
        if self.path_pattern:
            self._compiled = re.compile(self.path_pattern)

    @property
    def key(self) -> str:
        return self.path_pattern or "default"

    def matches(self, path: str) -> bool:
        return self._compiled is None or self._compiled.match(path) is not None


@dataclass
class Window:
    count: int = 0
    started: float = 0.0


class RateLimitStore:
    """Request counters per (client, rule)."""

    def __init__(self, clock=time.time):
        self.clock = clock
        self._windows: dict[tuple[str, str], Window] = {}

    def hit(self, client_id: str, rule: RateLimitRule) -> tuple[bool, int, int]:
        """Count one request.

        Returns:
            Tuple of (allowed, remaining, reset_at) where reset_at is the
            Unix time the current window ends
        """
        now = self.clock()
        window = self._windows.setdefault((client_id, rule.key), Window(started=now))
        if now - window.started >= rule.window_seconds:
            window.count = 0
            window.started = now

        reset_at = int(window.started + rule.window_seconds)
        if window.count >= rule.requests:
            return False, 0, reset_at

        window.count += 1
        return True, rule.requests - window.count, reset_at

    def prune(self, max_age: float) -> None:
        """Drop windows older than max_age seconds."""
        now = self.clock()
        stale = [k for k, w in self._windows.items() if now - w.started > max_age]
        for key in stale:
            del self._windows[key]

    def reset(self) -> None:
        self._windows.clear()


DEFAULT_RULES = [
    RateLimitRule(requests=5, window_seconds=60, path_pattern=r"^/api/login"),
    RateLimitRule(requests=10, window_seconds=60, path_pattern=r"^/api/admin/"),
    RateLimitRule(requests=120, window_seconds=60, path_pattern=r"^/api/"),
    RateLimitRule(requests=240, window_seconds=60),
]

EXEMPT_PATHS = ("/health", "/static")


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Apply the first matching rule to each request and set X-RateLimit-* headers.

    The last rule must be a catch-all (no path pattern). X-Forwarded-For is
    only honored when the direct peer is one of ``trusted_proxies``.
    """

    def __init__(
        self,
        app,
        rules: Optional[list[RateLimitRule]] = None,
        store: Optional[RateLimitStore] = None,
        trusted_proxies: Iterable[str] = (),
    ):
        super().__init__(app)
        self.rules = list(rules) if rules is not None else list(DEFAULT_RULES)
        if not self.rules or self.rules[-1].path_pattern is not None:
            raise ValueError("The last rate limit rule must have no path pattern")
        self.store = store if store is not None else RateLimitStore()
        self.trusted_proxies = frozenset(trusted_proxies)
        self._max_window = max(r.window_seconds for r in self.rules)

    def client_id(self, request: Request) -> str:
        peer = request.client.host if request.client else "unknown"
        if peer not in self.trusted_proxies:
            return peer

        # Walk the chain right to left, past our own proxies
        forwarded_for = request.headers.get("X-Forwarded-For", "")
        hops = [hop.strip() for hop in forwarded_for.split(",") if hop.strip()]
        for hop in reversed(hops):
            if hop not in self.trusted_proxies:
                return hop
        return hops[0] if hops else peer

    def rule_for(self, path: str) -> RateLimitRule:
        for rule in self.rules[:-1]:
            if rule.matches(path):
                return rule
        return self.rules[-1]

    @staticmethod
    def _with_headers(response: Response, rule: RateLimitRule, remaining: int, reset_at: int) -> Response:
        response.headers["X-RateLimit-Limit"] = str(rule.requests)
        response.headers["X-RateLimit-Remaining"] = str(remaining)
        response.headers["X-RateLimit-Reset"] = str(reset_at)
        return response

    async def dispatch(self, request: Request, call_next) -> Response:
        path = request.url.path
        if path.startswith(EXEMPT_PATHS):
            return await call_next(request)

        rule = self.rule_for(path)
        self.store.prune(self._max_window * 2)
        allowed, remaining, reset_at = self.store.hit(self.client_id(request), rule)

        if not allowed:
            retry_after = max(0, reset_at - int(self.store.clock()))
            response = JSONResponse(
                status_code=429,
                content={"detail": "Rate limit exceeded. Please try again later.", "retry_after": retry_after},
            )
            response.headers["Retry-After"] = str(retry_after)
            return self._with_headers(response, rule, remaining, reset_at)

        response = await call_next(request)
        return self._with_headers(response, rule, remaining, reset_at)
