"""MCP tool specification."""

from mcp import Tool

from .json_schema import JSONSchema


def build_mcp_tool(name: str, description: str, schema: JSONSchema) -> Tool:
    """Build an MCP ``Tool`` for ``list_tools`` responses."""
    input_schema = dict(schema)
    input_schema.setdefault("type", "object")
    return Tool(name=name, description=description, inputSchema=input_schema)
