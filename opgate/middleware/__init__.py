"""
Bundled middleware: rate limiting, timeouts and call logging.
"""

from .logging_middleware import create_logging_middleware
from .rate_limiter import RateLimitEntry, RateLimiter, create_rate_limiter
from .timeout import TimeoutMiddleware, create_timeout_middleware

__all__ = [
    'create_logging_middleware',
    'RateLimitEntry',
    'RateLimiter',
    'create_rate_limiter',
    'TimeoutMiddleware',
    'create_timeout_middleware',
]
