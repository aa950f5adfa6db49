"""Timeout middleware.

The core records ``OperationConfig.timeout`` but never enforces it. This
middleware races the rest of the chain against a deadline and returns a
failed result when the deadline passes; the inner work is cancelled.
"""

import asyncio
import logging

from ..core.pipeline import MiddlewareParams
from ..models.result import ExecutionResult

logger = logging.getLogger(__name__)


class TimeoutMiddleware:
    """Fail calls whose inner chain runs longer than ``timeout`` seconds."""

    def __init__(self, timeout: float):
        if timeout <= 0:
            raise ValueError(f"timeout must be > 0, got {timeout}")
        self.timeout = timeout

    async def __call__(self, params: MiddlewareParams) -> ExecutionResult:
        try:
            return await asyncio.wait_for(params.next(), timeout=self.timeout)
        except asyncio.TimeoutError:
            logger.warning(f"Operation {params.operation_name} timed out after {self.timeout}s")
            return ExecutionResult.fail(
                f'Operation "{params.operation_name}" timed out after {self.timeout} seconds.',
                metadata={"timed_out": True, "timeout": self.timeout},
            )


def create_timeout_middleware(timeout: float) -> TimeoutMiddleware:
    return TimeoutMiddleware(timeout)
