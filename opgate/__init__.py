"""
opgate - validated, policy-gated operations for AI agents.

Wraps operation bodies with schema validation (pydantic), risk and
confirmation gating, lifecycle hooks and onion-style middleware, and
exports them as OpenAI, Anthropic and MCP tool specifications.
"""

from .core import (
    ADMIN_ROLE,
    ROOT_FIELD,
    ConfirmationRequiredError,
    FieldError,
    HookErrorPayload,
    HookStartPayload,
    HookSuccessPayload,
    LifecycleHooks,
    Middleware,
    MiddlewareParams,
    Operation,
    OperationError,
    OperationExecutionError,
    OperationValidationError,
    PolicyViolationError,
    ValidationResult,
    create_logging_hooks,
    create_operation,
    operation,
)
from .middleware import (
    RateLimiter,
    TimeoutMiddleware,
    create_logging_middleware,
    create_rate_limiter,
    create_timeout_middleware,
)
from .models import (
    ExecutionContext,
    ExecutionOptions,
    ExecutionResult,
    OperationConfig,
    RiskLevel,
    UserInfo,
)
from .registry import (
    OperationAlreadyRegistered,
    OperationNotFound,
    OperationRegistry,
    OperationRegistryError,
    get_operation_registry,
    reset_operation_registry,
)

__version__ = "0.1.0"

__all__ = [
    # Core
    'Operation',
    'create_operation',
    'operation',
    'ValidationResult',
    'LifecycleHooks',
    'HookStartPayload',
    'HookSuccessPayload',
    'HookErrorPayload',
    'create_logging_hooks',
    'Middleware',
    'MiddlewareParams',
    'ADMIN_ROLE',
    # Errors
    'ROOT_FIELD',
    'FieldError',
    'OperationError',
    'OperationValidationError',
    'PolicyViolationError',
    'ConfirmationRequiredError',
    'OperationExecutionError',
    # Middleware
    'RateLimiter',
    'TimeoutMiddleware',
    'create_logging_middleware',
    'create_rate_limiter',
    'create_timeout_middleware',
    # Models
    'ExecutionContext',
    'ExecutionOptions',
    'ExecutionResult',
    'OperationConfig',
    'RiskLevel',
    'UserInfo',
    # Registry
    'OperationRegistry',
    'OperationRegistryError',
    'OperationNotFound',
    'OperationAlreadyRegistered',
    'get_operation_registry',
    'reset_operation_registry',
]
