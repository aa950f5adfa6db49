"""
Operation Registry for opgate.

Provides a named, ordered catalog of operations.
"""

from .operation_registry import (
    OperationRegistry,
    # Exceptions
    OperationRegistryError,
    OperationNotFound,
    OperationAlreadyRegistered,
    InvalidOperationDescriptor,
    # Singleton
    get_operation_registry,
    reset_operation_registry,
)

__all__ = [
    'OperationRegistry',
    # Exceptions
    'OperationRegistryError',
    'OperationNotFound',
    'OperationAlreadyRegistered',
    'InvalidOperationDescriptor',
    # Singleton
    'get_operation_registry',
    'reset_operation_registry',
]
