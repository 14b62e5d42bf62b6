"""Admission control for completion requests."""

from .limiter import RateLimiter, estimate_tokens, get_rate_limiter

__all__ = ["RateLimiter", "estimate_tokens", "get_rate_limiter"]
