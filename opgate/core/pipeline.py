"""
Middleware pipeline.

Middleware wrap the core executor onion-style. Given ``[m1, m2, ..., mn]``
and a terminal function, ``m1`` runs first on the way in and last on the
way out; ``mn`` runs innermost:

    m1-enter, m2-enter, <core>, m2-exit, m1-exit

A middleware that returns without awaiting ``next()`` short-circuits: the
inner middleware and the core never run, and its result is what every outer
middleware sees. Exceptions are not caught by the pipeline.

Argument passing contract: ``next()`` takes no arguments and continues
with the same ``args`` and ``context`` objects this middleware received.
Mutating those objects in place (e.g. ``params.args["value"] = ...``) is
visible downstream; rebinding ``params.args`` to a new object is not.
"""

import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Sequence

from ..models.context import ExecutionContext
from ..models.result import ExecutionResult

logger = logging.getLogger(__name__)

NextFn = Callable[[], Awaitable[ExecutionResult]]
ChainFn = Callable[[Any, ExecutionContext], Awaitable[ExecutionResult]]


@dataclass
class MiddlewareParams:
    """Arguments handed to a middleware.

    Attributes:
        operation_name: Name of the operation being executed
        args: Raw (unvalidated) arguments, shared by reference downstream
        context: Execution context, shared by reference downstream
        next: Continue with the rest of the chain
    """
    operation_name: str
    args: Any
    context: ExecutionContext
    next: NextFn


Middleware = Callable[[MiddlewareParams], Awaitable[ExecutionResult]]


def _link(middleware: Middleware, inner: ChainFn, operation_name: str) -> ChainFn:
    async def chain(args: Any, context: ExecutionContext) -> ExecutionResult:
        async def next_fn() -> ExecutionResult:
            return await inner(args, context)

        return await middleware(MiddlewareParams(
            operation_name=operation_name,
            args=args,
            context=context,
            next=next_fn,
        ))

    return chain


def compose(
    middleware: Sequence[Middleware],
    terminal: ChainFn,
    operation_name: str
) -> ChainFn:
    """
    Build the call chain from the tail.

    Args:
        middleware: Interceptors, outermost first
        terminal: Innermost step (the core executor)
        operation_name: Passed to every middleware

    Returns:
        ``chain(args, context)`` that runs the whole onion
    """
    chain = terminal
    for mw in reversed(middleware):
        chain = _link(mw, chain, operation_name)
    return chain
