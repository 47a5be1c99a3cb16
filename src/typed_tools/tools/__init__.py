"""Tool building blocks.

``Tool`` subclasses (or ``tool_function``-decorated coroutines) carry typed
pydantic inputs and outputs; ``ToolHandler`` wraps one of them behind the
JSON-only surface the registry stores.
"""

from __future__ import annotations

from typed_tools.tools.base import Tool, ToolError, ToolRequest, ToolResponse, schema_for_type
from typed_tools.tools.function import FunctionTool, tool_function
from typed_tools.tools.handler import ToolHandler

__all__ = [
    "FunctionTool",
    "Tool",
    "ToolError",
    "ToolHandler",
    "ToolRequest",
    "ToolResponse",
    "schema_for_type",
    "tool_function",
]
