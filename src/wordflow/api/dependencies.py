"""Common dependencies for FastAPI routes."""

from fastapi_throttle import RateLimiter

# Rate limiter for routes that call a provider
router_limiter = RateLimiter(times=5, seconds=30)
