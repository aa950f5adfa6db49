"""
Lifecycle hooks and their dispatcher.

Hooks are observability callbacks (sync or async) fired around the
operation body:

    on_start    after all gates pass, before the body runs
    on_success  after the body returns
    on_error    after the body raises

Hook failures are isolated: an exception raised by a hook is logged and
discarded, so it never changes the outcome of the call it observes.
"""

import inspect
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Optional, Union

from ..config.settings import is_enabled
from ..models.context import ExecutionContext

logger = logging.getLogger(__name__)


class HookKind(Enum):
    START = "on_start"
    SUCCESS = "on_success"
    ERROR = "on_error"


@dataclass(frozen=True)
class HookStartPayload:
    operation_name: str
    args: Any
    context: ExecutionContext


@dataclass(frozen=True)
class HookSuccessPayload:
    operation_name: str
    result: Any
    duration_ms: float
    context: ExecutionContext


@dataclass(frozen=True)
class HookErrorPayload:
    operation_name: str
    error: BaseException
    duration_ms: float
    context: ExecutionContext


HookPayload = Union[HookStartPayload, HookSuccessPayload, HookErrorPayload]


@dataclass(frozen=True)
class LifecycleHooks:
    """Optional lifecycle callbacks. Each receives its payload object."""
    on_start: Optional[Callable[[HookStartPayload], Union[None, Awaitable[None]]]] = None
    on_success: Optional[Callable[[HookSuccessPayload], Union[None, Awaitable[None]]]] = None
    on_error: Optional[Callable[[HookErrorPayload], Union[None, Awaitable[None]]]] = None


class HookDispatcher:
    """Fires hooks best-effort, awaiting async hooks before returning."""

    def __init__(self, hooks: Optional[LifecycleHooks] = None):
        self.hooks = hooks

    async def fire(self, kind: HookKind, payload: HookPayload) -> None:
        if self.hooks is None:
            return

        hook = getattr(self.hooks, kind.value)
        if hook is None:
            return

        try:
            outcome = hook(payload)
            if inspect.isawaitable(outcome):
                await outcome
        except Exception:
            if is_enabled('log_hook_failures'):
                logger.warning(
                    f"Hook {kind.value} failed for {payload.operation_name}; ignoring",
                    exc_info=True,
                )


def create_logging_hooks(
    log: Optional[logging.Logger] = None,
    prefix: str = "[opgate]"
) -> LifecycleHooks:
    """
    Create hooks that report the lifecycle through ``logging``.

    Args:
        log: Logger to write to (default: this module's logger)
        prefix: Prefix for each message

    Example:
        config = OperationConfig(hooks=create_logging_hooks())
    """
    target = log or logger

    def on_start(payload: HookStartPayload) -> None:
        target.info(f"{prefix} START {payload.operation_name} args={payload.args!r}")

    def on_success(payload: HookSuccessPayload) -> None:
        target.info(
            f"{prefix} SUCCESS {payload.operation_name} ({payload.duration_ms:.2f}ms)"
        )

    def on_error(payload: HookErrorPayload) -> None:
        target.error(
            f"{prefix} ERROR {payload.operation_name} "
            f"({payload.duration_ms:.2f}ms): {payload.error}"
        )

    return LifecycleHooks(on_start=on_start, on_success=on_success, on_error=on_error)
