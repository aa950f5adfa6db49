"""MCP server exposing an OperationRegistry as tools."""

import asyncio
import importlib
import logging
from typing import Any, Dict, List, Mapping, Optional

from mcp import Tool
from mcp.server import NotificationOptions, Server
from mcp.server.models import InitializationOptions
from mcp.types import TextContent

from .config.settings import get_setting
from .core.errors import OperationError
from .models.context import ContextLike, ExecutionOptions
from .registry.operation_registry import (
    OperationNotFound,
    OperationRegistry,
    OperationRegistryError,
    get_operation_registry,
)
from .utils.response import error_response, exception_response, result_response, to_json

logger = logging.getLogger(__name__)

SERVER_NAME = "opgate"
SERVER_VERSION = "0.1.0"


class OperationMCPServer:
    """MCP server that lists and executes registry operations.

    MCP tool calls carry no caller identity, so every call runs with the
    server's ``context`` and ``options`` (e.g. a service account, or
    ``confirmed=True`` when the client confirms on its own side).
    """

    def __init__(
        self,
        registry: Optional[OperationRegistry] = None,
        context: ContextLike = None,
        options: Optional[ExecutionOptions] = None,
        name: str = SERVER_NAME
    ):
        self.registry = registry if registry is not None else get_operation_registry()
        self.context = context
        self.options = options
        self.server = Server(name)

        self._register_handlers()

    def _register_handlers(self):
        """Register all MCP handlers."""

        @self.server.list_tools()
        async def handle_list_tools() -> list[Tool]:
            return self.list_tools()

        @self.server.call_tool()
        async def handle_call_tool(name: str, arguments: dict) -> list[TextContent]:
            return await self.call_tool(name, arguments)

    def list_tools(self) -> List[Tool]:
        """All registered operations as MCP tools."""
        return self.registry.get_mcp_tools()

    async def call_tool(
        self,
        name: str,
        arguments: Optional[Mapping[str, Any]]
    ) -> List[TextContent]:
        """Execute an operation and encode the outcome as JSON text.

        Gate and execution errors become error envelopes; returned
        failures (middleware short-circuits) keep their own error text.
        """
        response: Dict[str, Any]
        try:
            result = await self.registry.execute(
                name,
                dict(arguments or {}),
                self.context,
                self.options,
            )
            response = result_response(result)
        except OperationNotFound as e:
            logger.error(f"Unknown tool requested: {name}")
            response = error_response(str(e), code="UNKNOWN_OPERATION")
        except OperationError as e:
            logger.error(f"Error executing tool {name}: {e}")
            response = exception_response(e)

        return [TextContent(type="text", text=to_json(response))]

    async def run(self):
        """Run the MCP server over stdio."""
        from mcp.server.stdio import stdio_server

        try:
            async with stdio_server() as (read_stream, write_stream):
                await self.server.run(
                    read_stream,
                    write_stream,
                    InitializationOptions(
                        server_name=self.server.name,
                        server_version=SERVER_VERSION,
                        capabilities=self.server.get_capabilities(
                            notification_options=NotificationOptions(),
                            experimental_capabilities={}
                        )
                    )
                )
        finally:
            await self.registry.aclose()


def load_operations(module_name: str, registry: OperationRegistry) -> None:
    """
    Import ``module_name`` and call its ``register_operations(registry)``.

    Raises:
        OperationRegistryError: If the module has no register_operations
    """
    module = importlib.import_module(module_name)
    register = getattr(module, "register_operations", None)
    if not callable(register):
        raise OperationRegistryError(
            f"Module '{module_name}' does not define register_operations(registry)"
        )

    register(registry)
    logger.info(f"Loaded operations from {module_name}: {len(registry)} registered")


def main():
    """Main entry point: serve the process-wide registry."""
    logging.basicConfig(level=get_setting('log_level'))

    registry = get_operation_registry()
    module_name = get_setting('operations_module')
    if module_name:
        load_operations(module_name, registry)
    else:
        logger.warning("OPGATE_OPERATIONS_MODULE is not set; serving an empty registry")

    server = OperationMCPServer(registry)
    asyncio.run(server.run())


if __name__ == "__main__":
    main()
