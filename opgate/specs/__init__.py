"""
Outbound tool specifications for model providers and MCP clients.
"""

from .anthropic import build_anthropic_spec
from .json_schema import JSONSchema, build_json_schema, inline_refs
from .mcp import build_mcp_tool
from .openai import apply_strict_mode, build_openai_spec

__all__ = [
    'build_anthropic_spec',
    'JSONSchema',
    'build_json_schema',
    'inline_refs',
    'build_mcp_tool',
    'apply_strict_mode',
    'build_openai_spec',
]
