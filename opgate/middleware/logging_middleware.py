"""Middleware that logs each call on the way in and out."""

import logging
import time
from typing import Optional

from ..core.pipeline import Middleware, MiddlewareParams
from ..models.result import ExecutionResult

logger = logging.getLogger(__name__)


def create_logging_middleware(
    log: Optional[logging.Logger] = None,
    level: int = logging.INFO
) -> Middleware:
    """
    Create a middleware that logs entry, exit and elapsed time.

    Short-circuited results from inner middleware are logged like any
    other failure. Exceptions are logged and re-raised.

    Args:
        log: Logger to write to (default: this module's logger)
        level: Level for entry/exit messages
    """
    target = log or logger

    async def logging_middleware(params: MiddlewareParams) -> ExecutionResult:
        target.log(level, f"-> {params.operation_name}")
        start = time.perf_counter()
        try:
            result = await params.next()
        except Exception as exc:
            elapsed = (time.perf_counter() - start) * 1000
            target.log(level, f"<- {params.operation_name} raised {type(exc).__name__} ({elapsed:.2f}ms)")
            raise

        elapsed = (time.perf_counter() - start) * 1000
        status = "ok" if result.success else f"failed: {result.error}"
        target.log(level, f"<- {params.operation_name} {status} ({elapsed:.2f}ms)")
        return result

    return logging_middleware
