"""Typed tool registry with a uniform JSON invocation boundary."""

from __future__ import annotations

from typed_tools.errors import (
    DecodeError,
    DispatchError,
    EncodeError,
    ErrorKind,
    HandlerError,
    InvocationError,
    ToolNotFoundError,
)
from typed_tools.registry import BatchPolicy, ToolRegistry
from typed_tools.tools.base import Tool, ToolError, ToolRequest, ToolResponse
from typed_tools.tools.function import FunctionTool, tool_function
from typed_tools.tools.handler import ToolHandler
from typed_tools.types import CallRequest, CallResponse, ToolDescriptor

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "BatchPolicy",
    "CallRequest",
    "CallResponse",
    "DecodeError",
    "DispatchError",
    "EncodeError",
    "ErrorKind",
    "FunctionTool",
    "HandlerError",
    "InvocationError",
    "Tool",
    "ToolDescriptor",
    "ToolError",
    "ToolHandler",
    "ToolNotFoundError",
    "ToolRegistry",
    "ToolRequest",
    "ToolResponse",
    "tool_function",
]
