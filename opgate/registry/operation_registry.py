"""
Operation Registry - Named catalog of executable operations.

Provides:
- Unique-name registration and lookup
- Filtering by tag and risk level
- Execution by name through each operation's own pipeline
- Bulk spec export (OpenAI, Anthropic, MCP) in registration order
- Teardown of middleware that own background tasks (rate limiters)
"""

import inspect
import logging
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Union

from mcp import Tool

from ..core.operation import Operation
from ..models.config import RiskLevel
from ..models.context import ContextLike, ExecutionOptions
from ..models.result import ExecutionResult

logger = logging.getLogger(__name__)


# ============================================================================
# Exceptions
# ============================================================================

class OperationRegistryError(Exception):
    """Base exception for registry errors."""
    pass


class OperationNotFound(OperationRegistryError):
    """Operation not found in registry."""
    pass


class OperationAlreadyRegistered(OperationRegistryError):
    """Operation already registered."""
    pass


class InvalidOperationDescriptor(OperationRegistryError):
    """Object passed to register() is not an Operation."""
    pass


# ============================================================================
# Operation Registry
# ============================================================================

class OperationRegistry:
    """
    Central registry for operations.

    Iteration and bulk export follow registration order.
    """

    def __init__(self, operations: Optional[Iterable[Operation]] = None):
        """Initialize registry, optionally registering ``operations``."""
        self._operations: Dict[str, Operation] = {}

        logger.info("OperationRegistry initialized")

        if operations:
            self.register_all(operations)

    # ========================================================================
    # Registration
    # ========================================================================

    def register(self, operation: Operation) -> Operation:
        """
        Register a new operation.

        Args:
            operation: Operation to register

        Returns:
            The registered operation (so this can be used inline)

        Raises:
            OperationAlreadyRegistered: If operation name already exists
            InvalidOperationDescriptor: If ``operation`` is not an Operation
        """
        if not isinstance(operation, Operation):
            raise InvalidOperationDescriptor(
                f"Expected Operation, got {type(operation).__name__}"
            )

        if operation.name in self._operations:
            raise OperationAlreadyRegistered(
                f"Operation '{operation.name}' already registered"
            )

        self._operations[operation.name] = operation

        logger.info(
            f"Registered operation: {operation.name} "
            f"(risk: {operation.config.risk_level.value}, "
            f"middleware: {len(operation.config.middleware)})"
        )
        return operation

    def register_all(self, operations: Iterable[Operation]) -> None:
        """
        Register multiple operations at once.

        Args:
            operations: Operations to register
        """
        for operation in operations:
            self.register(operation)

    def unregister(self, name: str) -> Operation:
        """
        Remove an operation.

        Raises:
            OperationNotFound: If operation doesn't exist
        """
        operation = self.get(name)
        del self._operations[name]
        logger.info(f"Unregistered operation: {name}")
        return operation

    # ========================================================================
    # Retrieval
    # ========================================================================

    def get(self, name: str) -> Operation:
        """
        Retrieve an operation by name.

        Raises:
            OperationNotFound: If operation doesn't exist
        """
        if name not in self._operations:
            available = ', '.join(self._operations) or 'none'
            raise OperationNotFound(
                f"Operation '{name}' not found. Available operations: {available}"
            )

        return self._operations[name]

    def list(
        self,
        tag: Optional[str] = None,
        risk_level: Optional[Union[RiskLevel, str]] = None
    ) -> List[Operation]:
        """
        List operations with optional filters.

        Args:
            tag: Only operations carrying this tag
            risk_level: Only operations at this risk level

        Returns:
            Operations in registration order
        """
        operations = list(self._operations.values())

        if tag:
            operations = [op for op in operations if tag in op.config.tags]

        if risk_level is not None:
            level = RiskLevel.coerce(risk_level)
            operations = [op for op in operations if op.config.risk_level == level]

        return operations

    def names(self) -> List[str]:
        return list(self._operations)

    def exists(self, name: str) -> bool:
        """Check if operation exists."""
        return name in self._operations

    def __contains__(self, name: object) -> bool:
        return name in self._operations

    def __len__(self) -> int:
        return len(self._operations)

    def __iter__(self) -> Iterator[Operation]:
        return iter(list(self._operations.values()))

    # ========================================================================
    # Execution
    # ========================================================================

    async def execute(
        self,
        operation_name: str,
        args: Any,
        context: ContextLike = None,
        options: Union[ExecutionOptions, Mapping[str, Any], None] = None
    ) -> ExecutionResult:
        """
        Execute an operation by name.

        Raises:
            OperationNotFound: If operation doesn't exist
            OperationError: Any gate or execution failure from the operation
        """
        operation = self.get(operation_name)
        return await operation.execute(args, context, options)

    # ========================================================================
    # Spec Generation
    # ========================================================================

    def get_openai_specs(self, strict: bool = False) -> List[Dict[str, Any]]:
        """OpenAI ``tools`` list for every registered operation."""
        return [op.to_openai_spec(strict=strict) for op in self._operations.values()]

    def get_anthropic_specs(self) -> List[Dict[str, Any]]:
        """Anthropic ``tools`` list for every registered operation."""
        return [op.to_anthropic_spec() for op in self._operations.values()]

    def get_mcp_tools(self) -> List[Tool]:
        """MCP tools for every registered operation."""
        return [op.to_mcp_tool() for op in self._operations.values()]

    def get_operation_docs(self, operation_name: str) -> Dict[str, Any]:
        """
        Get documentation for an operation.

        Raises:
            OperationNotFound: If operation doesn't exist
        """
        operation = self.get(operation_name)

        return {
            "name": operation.name,
            "description": operation.description,
            "input_schema": operation.json_schema(),
            "config": operation.config.to_dict(),
        }

    # ========================================================================
    # Teardown
    # ========================================================================

    async def aclose(self) -> None:
        """
        Close middleware that own background work (e.g. rate limiters).

        Middleware shared between operations are closed once.
        """
        closed = set()
        for operation in self._operations.values():
            for mw in operation.config.middleware:
                if id(mw) in closed:
                    continue
                closer = getattr(mw, "aclose", None)
                if closer is None:
                    continue
                closed.add(id(mw))
                outcome = closer()
                if inspect.isawaitable(outcome):
                    await outcome

        if closed:
            logger.info(f"Closed {len(closed)} middleware instance(s)")


# ============================================================================
# Singleton
# ============================================================================

_registry_instance: Optional[OperationRegistry] = None


def get_operation_registry() -> OperationRegistry:
    """
    Get singleton instance of operation registry.

    Returns:
        OperationRegistry singleton
    """
    global _registry_instance

    if _registry_instance is None:
        _registry_instance = OperationRegistry()

    return _registry_instance


def reset_operation_registry() -> None:
    """Reset singleton (for testing)."""
    global _registry_instance
    _registry_instance = None
