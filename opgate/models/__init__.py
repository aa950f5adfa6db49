"""
Data model for opgate: configuration, context, options and results.
"""

from .config import OperationConfig, RiskLevel
from .context import (
    ContextLike,
    ExecutionContext,
    ExecutionOptions,
    UserInfo,
    coerce_context,
)
from .result import ExecutionResult

__all__ = [
    'OperationConfig',
    'RiskLevel',
    'ContextLike',
    'ExecutionContext',
    'ExecutionOptions',
    'UserInfo',
    'coerce_context',
    'ExecutionResult',
]
