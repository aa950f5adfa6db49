"""
Core executor: the innermost step of every operation's pipeline.

Per call:

    VALIDATE -> POLICY_CHECK -> CONFIRMATION_CHECK -> HOOK_START
             -> RUN_BODY -> HOOK_SUCCESS | HOOK_ERROR

Gate failures are raised (OperationValidationError, PolicyViolationError,
ConfirmationRequiredError) before any hook fires. This differs from
middleware, which report failures by returning
``ExecutionResult(success=False)``; callers must handle both.

A body failure fires ``on_error`` and is re-raised as
OperationExecutionError chained to the original exception.

Timing runs from just before validation to just after the body settles and
excludes hook time.
"""

import inspect
import logging
import time
from typing import Any, Awaitable, Callable, Union

from ..models.config import OperationConfig
from ..models.context import ExecutionContext, ExecutionOptions
from ..models.result import ExecutionResult
from .errors import OperationExecutionError, OperationValidationError
from .hooks import (
    HookDispatcher,
    HookErrorPayload,
    HookKind,
    HookStartPayload,
    HookSuccessPayload,
)
from .policy import evaluate_policy, raise_for_decision
from .validation import SchemaValidator

logger = logging.getLogger(__name__)

OperationBody = Callable[[Any, ExecutionContext], Union[Any, Awaitable[Any]]]


def _elapsed_ms(start: float) -> float:
    return (time.perf_counter() - start) * 1000


class CoreExecutor:
    """Validation, policy gating and hooks around one operation body."""

    def __init__(
        self,
        operation_name: str,
        validator: SchemaValidator,
        body: OperationBody,
        config: OperationConfig
    ):
        self.operation_name = operation_name
        self.validator = validator
        self.body = body
        self.config = config
        self.dispatcher = HookDispatcher(config.hooks)

    async def run(
        self,
        args: Any,
        context: ExecutionContext,
        options: ExecutionOptions
    ) -> ExecutionResult:
        """
        Execute one call.

        Raises:
            OperationValidationError: If args do not match the schema
            PolicyViolationError: If a HIGH risk call lacks admin or sudo
            ConfirmationRequiredError: If confirmation is required but absent
            OperationExecutionError: If the body raises
        """
        start = time.perf_counter()

        validation = self.validator.validate(args)
        if not validation.success:
            raise OperationValidationError(
                self.operation_name,
                field_errors=validation.field_errors,
                args=args,
            )
        validated = validation.data

        decision = evaluate_policy(
            self.config,
            context,
            options,
            args=validated,
            operation_name=self.operation_name,
        )
        raise_for_decision(decision)

        await self.dispatcher.fire(HookKind.START, HookStartPayload(
            operation_name=self.operation_name,
            args=validated,
            context=context,
        ))

        try:
            data = self.body(validated, context)
            if inspect.isawaitable(data):
                data = await data
        except Exception as exc:
            duration_ms = _elapsed_ms(start)
            logger.warning(
                f"Operation {self.operation_name} failed after {duration_ms:.2f}ms: {exc}"
            )

            await self.dispatcher.fire(HookKind.ERROR, HookErrorPayload(
                operation_name=self.operation_name,
                error=exc,
                duration_ms=duration_ms,
                context=context,
            ))

            raise OperationExecutionError(
                self.operation_name,
                cause=exc,
                execution_time_ms=duration_ms,
                args=validated,
            ) from exc

        duration_ms = _elapsed_ms(start)
        logger.debug(f"Operation {self.operation_name} succeeded in {duration_ms:.2f}ms")

        await self.dispatcher.fire(HookKind.SUCCESS, HookSuccessPayload(
            operation_name=self.operation_name,
            result=data,
            duration_ms=duration_ms,
            context=context,
        ))

        return ExecutionResult.ok(data, metadata={
            "execution_time_ms": duration_ms,
            "operation_name": self.operation_name,
            "risk_level": self.config.risk_level.value,
        })
