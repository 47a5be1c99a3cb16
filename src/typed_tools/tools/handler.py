"""JSON-facing wrapper around a typed tool.

``ToolHandler`` is what the registry stores: every handler exposes the same
name/description/schema/``invoke_json`` surface whatever the wrapped tool's
parameter, output, and error types are. Decoding and encoding go through
pydantic ``TypeAdapter`` instances built once per handler.
"""

from __future__ import annotations

import json
from typing import Any

from pydantic import TypeAdapter, ValidationError
from pydantic_core import PydanticSerializationError

from typed_tools.errors import DecodeError, EncodeError, HandlerError
from typed_tools.tools.base import Tool
from typed_tools.types import ToolDescriptor


class ToolHandler:
    """Type-erased view of one tool."""

    __slots__ = ("_tool", "_input_adapter", "_output_adapter")

    def __init__(self, tool: Tool[Any, Any]) -> None:
        self._tool = tool
        self._input_adapter: TypeAdapter[Any] = TypeAdapter(tool.InputModel)
        self._output_adapter: TypeAdapter[Any] = TypeAdapter(tool.OutputModel)

    @property
    def name(self) -> str:
        return self._tool.name

    @property
    def description(self) -> str:
        return self._tool.description

    @property
    def tool(self) -> Tool[Any, Any]:
        return self._tool

    def schema(self) -> dict[str, Any]:
        return self._tool.schema()

    def descriptor(self) -> ToolDescriptor:
        return ToolDescriptor(name=self.name, description=self.description, schema=self.schema())

    async def invoke_json(self, arguments: Any) -> Any:
        """Decode ``arguments`` (a decoded JSON value), run the tool, and return a JSON-compatible result.

        Raises ``DecodeError``, ``HandlerError`` or ``EncodeError``.
        """

        params = self._decode(arguments)
        try:
            result = await self._tool.call(params)
        except self._tool.Error as exc:
            raise HandlerError(self.name, str(exc)) from exc
        return self._encode(result)

    def _decode(self, arguments: Any) -> Any:
        # strict JSON mode: no "5" -> 5 coercion, enums still accepted by value
        try:
            text = json.dumps(arguments, allow_nan=False)
        except (TypeError, ValueError) as exc:
            raise DecodeError(self.name, f"arguments for tool '{self.name}' are not a JSON value: {exc}") from exc
        try:
            return self._input_adapter.validate_json(text, strict=True)
        except ValidationError as exc:
            raise DecodeError.from_validation_error(self.name, exc) from exc

    def _encode(self, result: Any) -> Any:
        try:
            return self._output_adapter.dump_python(result, mode="json")
        except PydanticSerializationError as exc:
            raise EncodeError(self.name, f"failed to encode result of tool '{self.name}': {exc}") from exc

    def __repr__(self) -> str:
        return f"ToolHandler(name={self.name!r})"


__all__ = ["ToolHandler"]
