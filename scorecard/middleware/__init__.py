"""HTTP middleware."""

from scorecard.middleware.rate_limit import RateLimitMiddleware, RateLimitStore

__all__ = ["RateLimitMiddleware", "RateLimitStore"]
