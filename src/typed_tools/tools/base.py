"""Abstract base classes for tools."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, ClassVar, Generic, TypeVar

from pydantic import BaseModel, TypeAdapter

Req = TypeVar("Req")
Res = TypeVar("Res")


class ToolRequest(BaseModel):
    """Marker base class for tool requests.

    Unknown argument fields are ignored when decoding; the advertised schema
    still closes the object with ``additionalProperties: false``.
    """


class ToolResponse(BaseModel):
    """Marker base class for tool responses."""


class ToolError(Exception):
    """Domain failure reported by a tool; its message is shown to the caller."""


class Tool(Generic[Req, Res], ABC):
    """Abstract tool with typed request/response.

    ``InputModel`` may be a ``ToolRequest`` subclass or any type pydantic can
    validate. Raising an exception matching ``Error`` from ``call`` signals a
    domain failure; anything else is treated as a bug and propagates.
    """

    name: ClassVar[str]
    description: ClassVar[str]
    InputModel: ClassVar[Any]
    OutputModel: ClassVar[Any] = Any
    Error: ClassVar[type[Exception] | tuple[type[Exception], ...]] = ToolError

    def schema(self) -> dict[str, Any]:
        """Return the JSON schema describing ``InputModel``."""

        return schema_for_type(self.InputModel)

    @abstractmethod
    async def call(self, params: Req) -> Res:
        """Run the tool and return a response."""


def schema_for_type(model: Any) -> dict[str, Any]:
    if isinstance(model, type) and issubclass(model, BaseModel):
        params = model.model_json_schema()
        params.setdefault("additionalProperties", False)
        return params
    return TypeAdapter(model).json_schema()


__all__ = ["ToolRequest", "ToolResponse", "ToolError", "Tool", "Req", "Res", "schema_for_type"]
