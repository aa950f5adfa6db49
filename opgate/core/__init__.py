"""
Core execution pipeline: validation, policy, hooks, middleware, executor.
"""

from .errors import (
    ROOT_FIELD,
    ConfirmationRequiredError,
    FieldError,
    OperationError,
    OperationExecutionError,
    OperationValidationError,
    PolicyViolationError,
)
from .executor import CoreExecutor, OperationBody
from .hooks import (
    HookDispatcher,
    HookErrorPayload,
    HookKind,
    HookStartPayload,
    HookSuccessPayload,
    LifecycleHooks,
    create_logging_hooks,
)
from .operation import Operation, create_operation, operation
from .pipeline import Middleware, MiddlewareParams, compose
from .policy import (
    ADMIN_ROLE,
    Allow,
    DenyConfirmation,
    DenyRisk,
    PolicyDecision,
    evaluate_policy,
    raise_for_decision,
)
from .validation import SchemaValidator, ValidationResult

__all__ = [
    # Errors
    'ROOT_FIELD',
    'ConfirmationRequiredError',
    'FieldError',
    'OperationError',
    'OperationExecutionError',
    'OperationValidationError',
    'PolicyViolationError',
    # Executor
    'CoreExecutor',
    'OperationBody',
    # Hooks
    'HookDispatcher',
    'HookErrorPayload',
    'HookKind',
    'HookStartPayload',
    'HookSuccessPayload',
    'LifecycleHooks',
    'create_logging_hooks',
    # Operation
    'Operation',
    'create_operation',
    'operation',
    # Pipeline
    'Middleware',
    'MiddlewareParams',
    'compose',
    # Policy
    'ADMIN_ROLE',
    'Allow',
    'DenyConfirmation',
    'DenyRisk',
    'PolicyDecision',
    'evaluate_policy',
    'raise_for_decision',
    # Validation
    'SchemaValidator',
    'ValidationResult',
]
