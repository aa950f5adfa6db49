"""
Operation: a named, schema-validated, policy-gated unit of work.

Example:
    from pydantic import BaseModel
    from opgate import Operation, RiskLevel

    class WeatherArgs(BaseModel):
        city: str
        units: str = "celsius"

    async def get_weather(args: WeatherArgs, context):
        return {"temperature": 22, "conditions": "sunny"}

    weather = Operation(
        name="get_weather",
        description="Retrieves the current weather for a city.",
        schema=WeatherArgs,
        body=get_weather,
        config={"risk_level": RiskLevel.LOW},
    )

    result = await weather.execute({"city": "Istanbul"})
    tools = [weather.to_openai_spec(strict=True)]
"""

import logging
from typing import Any, Dict, Mapping, Optional, Union

from mcp import Tool

from ..models.config import OperationConfig
from ..models.context import ContextLike, ExecutionOptions, coerce_context
from ..models.result import ExecutionResult
from ..specs.anthropic import build_anthropic_spec
from ..specs.mcp import build_mcp_tool
from ..specs.openai import build_openai_spec
from .executor import CoreExecutor, OperationBody
from .pipeline import compose
from .validation import SchemaValidator, ValidationResult

logger = logging.getLogger(__name__)


class Operation:
    """
    Wraps an operation body with validation, policy and middleware.

    Identity, schema, body and configuration are fixed at construction.
    """

    def __init__(
        self,
        name: str,
        description: str,
        schema: Any,
        body: OperationBody,
        config: Union[OperationConfig, Mapping[str, Any], None] = None
    ):
        """
        Create an operation.

        Args:
            name: Unique name, used as the tool name in provider specs
            description: What the operation does, shown to the model
            schema: pydantic model (or any type TypeAdapter accepts)
            body: ``(validated_args, context) -> output``, sync or async
            config: OperationConfig or a mapping of overrides

        Raises:
            ValueError: If name or description is empty
        """
        if not isinstance(name, str) or not name.strip():
            raise ValueError("Operation name is required and cannot be empty")

        if not isinstance(description, str) or not description.strip():
            raise ValueError("Operation description is required and cannot be empty")

        if not callable(body):
            raise TypeError("Operation body must be callable")

        self._name = name.strip()
        self._description = description.strip()
        self._schema = schema
        self._body = body
        self._config = OperationConfig.from_overrides(config)
        self._validator: SchemaValidator = SchemaValidator(schema)
        self._core = CoreExecutor(self._name, self._validator, body, self._config)

    @property
    def name(self) -> str:
        return self._name

    @property
    def description(self) -> str:
        return self._description

    @property
    def schema(self) -> Any:
        return self._schema

    @property
    def config(self) -> OperationConfig:
        return self._config

    # ========================================================================
    # Validation
    # ========================================================================

    def validate(self, args: Any) -> ValidationResult:
        """
        Validate arguments without executing.

        Useful for preview or confirmation flows.
        """
        return self._validator.validate(args)

    # ========================================================================
    # Execution
    # ========================================================================

    async def execute(
        self,
        args: Any,
        context: ContextLike = None,
        options: Union[ExecutionOptions, Mapping[str, Any], None] = None
    ) -> ExecutionResult:
        """
        Run the middleware chain and, unless short-circuited, the core.

        Args:
            args: Raw arguments (validated by the core, not by middleware)
            context: ExecutionContext, a mapping, or None
            options: ExecutionOptions, a mapping, or None

        Returns:
            ExecutionResult from the core or from a short-circuiting middleware

        Raises:
            OperationValidationError: If args do not match the schema
            PolicyViolationError: If a HIGH risk call lacks admin or sudo
            ConfirmationRequiredError: If confirmation is required but absent
            OperationExecutionError: If the body raises
            pydantic.ValidationError: If a context mapping has the wrong shape
                (raised before any middleware runs)
            ValueError: If options name an unknown flag
        """
        exec_context = coerce_context(context)
        exec_options = ExecutionOptions.coerce(options)

        async def core(core_args: Any, core_context) -> ExecutionResult:
            return await self._core.run(core_args, core_context, exec_options)

        pipeline = compose(self._config.middleware, core, self._name)
        result = await pipeline(args, exec_context)

        if not isinstance(result, ExecutionResult):
            raise TypeError(
                f"Middleware for operation '{self._name}' returned "
                f"{type(result).__name__}, expected ExecutionResult"
            )

        return result

    # ========================================================================
    # Spec Generation
    # ========================================================================

    def json_schema(self) -> Dict[str, Any]:
        """JSON schema of the input, refs inlined."""
        return self._validator.json_schema()

    def to_openai_spec(self, strict: bool = False) -> Dict[str, Any]:
        """OpenAI ``tools`` entry; ``strict`` enables Structured Outputs."""
        return build_openai_spec(self._name, self._description, self.json_schema(), strict=strict)

    def to_anthropic_spec(self) -> Dict[str, Any]:
        """Anthropic ``tools`` entry."""
        return build_anthropic_spec(self._name, self._description, self.json_schema())

    def to_mcp_tool(self) -> Tool:
        """MCP ``Tool`` for list_tools."""
        return build_mcp_tool(self._name, self._description, self.json_schema())

    # ========================================================================
    # Utility
    # ========================================================================

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self._name,
            "description": self._description,
            "config": self._config.to_dict(),
        }

    def __repr__(self) -> str:
        return f"Operation({self._name})"


def create_operation(
    name: str,
    description: str,
    schema: Any,
    body: OperationBody,
    config: Union[OperationConfig, Mapping[str, Any], None] = None
) -> Operation:
    """Factory equivalent of ``Operation(...)``."""
    return Operation(name, description, schema, body, config)


def operation(
    schema: Any,
    name: Optional[str] = None,
    description: Optional[str] = None,
    config: Union[OperationConfig, Mapping[str, Any], None] = None
):
    """
    Decorator form: wrap a body function into an Operation.

    ``name`` defaults to the function name and ``description`` to its
    docstring.

    Example:
        @operation(EchoArgs, description="Echo the input.")
        async def echo(args, context):
            return {"value": args.value}
    """
    def decorator(func: OperationBody) -> Operation:
        return Operation(
            name=name or func.__name__,
            description=description or (func.__doc__ or "").strip(),
            schema=schema,
            body=func,
            config=config,
        )

    return decorator
