"""
Rate limiting middleware.

Fixed-window counters kept in memory, keyed by operation name plus the
caller's user id (or ``global`` when there is none). Counters expire lazily
when a key is next seen; a background cleanup task owned by the limiter
also purges expired keys so idle keys do not accumulate.

The cleanup task only runs between ``start()`` (or ``async with``) and
``aclose()``. Nothing is scheduled at construction time.

Usage:
    limiter = RateLimiter(window_ms=1000, limit=5)
    op = Operation(..., config={"middleware": [limiter]})

    async with limiter:
        await op.execute(args, context)

For multi-process deployments use a shared store instead.
"""

import asyncio
import logging
import math
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from ..config.settings import get_setting
from ..core.pipeline import MiddlewareParams
from ..models.context import ExecutionContext
from ..models.result import ExecutionResult

logger = logging.getLogger(__name__)

KeyGenerator = Callable[[ExecutionContext], Optional[str]]


@dataclass
class RateLimitEntry:
    """Calls counted in the current window for one key."""
    count: int
    reset_at: float


class RateLimiter:
    """In-memory fixed-window rate limiter usable as middleware."""

    def __init__(
        self,
        window_ms: Optional[int] = None,
        limit: Optional[int] = None,
        key_generator: Optional[KeyGenerator] = None,
        clock: Callable[[], float] = time.monotonic
    ):
        """
        Args:
            window_ms: Window length in milliseconds (default from settings)
            limit: Calls allowed per key per window (default from settings)
            key_generator: ``context -> key``; returning None falls back to
                ``<operation>:global``
            clock: Monotonic clock in seconds (injectable for tests)
        """
        self.window_ms = window_ms if window_ms is not None else get_setting('rate_limit_window_ms')
        self.limit = limit if limit is not None else get_setting('rate_limit_limit')

        if self.window_ms <= 0:
            raise ValueError(f"window_ms must be > 0, got {self.window_ms}")
        if self.limit < 1:
            raise ValueError(f"limit must be >= 1, got {self.limit}")

        self.key_generator = key_generator
        self._clock = clock
        self._storage: Dict[str, RateLimitEntry] = {}
        # asyncio alone makes check-and-increment atomic; the lock covers
        # limiters shared across threads or event loops
        self._lock = threading.Lock()
        self._cleanup_task: Optional[asyncio.Task] = None

    @property
    def window_seconds(self) -> float:
        return self.window_ms / 1000

    # ========================================================================
    # Middleware
    # ========================================================================

    def derive_key(self, operation_name: str, context: ExecutionContext) -> str:
        if self.key_generator is not None:
            return self.key_generator(context) or f"{operation_name}:global"

        user_id = context.effective_user_id
        return f"{operation_name}:{user_id}" if user_id else f"{operation_name}:global"

    def hit(self, key: str) -> Optional[float]:
        """
        Count one call against ``key``.

        Returns:
            None if the call is allowed, otherwise seconds until the window
            resets
        """
        with self._lock:
            now = self._clock()
            entry = self._storage.get(key)

            if entry is not None and now < entry.reset_at:
                if entry.count >= self.limit:
                    return entry.reset_at - now
                entry.count += 1
            else:
                self._storage[key] = RateLimitEntry(
                    count=1,
                    reset_at=now + self.window_seconds,
                )

            return None

    async def __call__(self, params: MiddlewareParams) -> ExecutionResult:
        key = self.derive_key(params.operation_name, params.context)
        retry_after = self.hit(key)

        if retry_after is not None:
            seconds = math.ceil(retry_after)
            logger.info(f"Rate limit exceeded for {key}; retry in {seconds}s")
            return ExecutionResult.fail(
                f"Rate limit exceeded. Try again in {seconds} seconds.",
                metadata={"rate_limited": True, "retry_after": seconds},
            )

        return await params.next()

    # ========================================================================
    # Expiry
    # ========================================================================

    def purge_expired(self) -> int:
        """Drop keys whose window has ended. Returns how many were dropped."""
        with self._lock:
            now = self._clock()
            expired = [key for key, entry in self._storage.items() if now >= entry.reset_at]
            for key in expired:
                del self._storage[key]

        if expired:
            logger.debug(f"Purged {len(expired)} expired rate limit key(s)")
        return len(expired)

    def reset(self) -> None:
        """Forget all counters."""
        with self._lock:
            self._storage.clear()

    def __len__(self) -> int:
        return len(self._storage)

    # ========================================================================
    # Background Cleanup
    # ========================================================================

    @property
    def running(self) -> bool:
        return self._cleanup_task is not None and not self._cleanup_task.done()

    def start(self) -> asyncio.Task:
        """
        Start the periodic cleanup task on the running event loop.

        Raises:
            RuntimeError: If called outside a running event loop
        """
        if self.running:
            return self._cleanup_task

        self._cleanup_task = asyncio.get_running_loop().create_task(self._cleanup_loop())
        logger.debug(f"Rate limiter cleanup started (every {self.window_ms}ms)")
        return self._cleanup_task

    async def _cleanup_loop(self) -> None:
        while True:
            await asyncio.sleep(self.window_seconds)
            self.purge_expired()

    async def aclose(self) -> None:
        """Cancel the cleanup task, if running. Safe to call repeatedly."""
        task, self._cleanup_task = self._cleanup_task, None
        if task is None or task.done():
            return

        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.debug("Rate limiter cleanup stopped")

    async def __aenter__(self) -> "RateLimiter":
        self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()


def create_rate_limiter(
    window_ms: Optional[int] = None,
    limit: Optional[int] = None,
    key_generator: Optional[KeyGenerator] = None
) -> RateLimiter:
    """Create a rate limiting middleware."""
    return RateLimiter(window_ms=window_ms, limit=limit, key_generator=key_generator)
