"""Wire-level data types exchanged with the model-facing collaborator."""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from typed_tools.errors import DispatchError


@dataclass(frozen=True, slots=True)
class ToolDescriptor:
    """Name, description and parameter schema advertised for one tool."""

    name: str
    description: str
    schema: Mapping[str, Any]

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "description": self.description, "schema": dict(self.schema)}

    def to_openai_tool(self) -> dict[str, Any]:
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": dict(self.schema),
            },
        }


@dataclass(frozen=True, slots=True)
class CallRequest:
    """One tool invocation requested by the caller.

    ``arguments`` is any decoded JSON value, so a ``str`` is a JSON string.
    Raw argument text, as sent by OpenAI-style tool calls, is parsed by
    ``from_dict`` and ``from_json_text``.
    """

    call_id: str
    fn_name: str
    arguments: Any = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not isinstance(self.call_id, str):
            raise TypeError("call_id must be a string")
        if not isinstance(self.fn_name, str):
            raise TypeError("fn_name must be a string")

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> CallRequest:
        if not isinstance(data, Mapping):
            raise ValueError("call request must be a JSON object")
        missing = [key for key in ("call_id", "fn_name") if key not in data]
        if missing:
            raise ValueError(f"call request missing fields: {', '.join(missing)}")
        arguments = data.get("arguments", {})
        if isinstance(arguments, str):
            return cls.from_json_text(data["call_id"], data["fn_name"], arguments)
        return cls(call_id=data["call_id"], fn_name=data["fn_name"], arguments=arguments)

    @classmethod
    def from_json_text(cls, call_id: str, fn_name: str, text: str) -> CallRequest:
        """Build a request whose arguments arrive as JSON text; raises ``ValueError`` if it is not JSON."""

        try:
            arguments = json.loads(text) if text.strip() else {}
        except json.JSONDecodeError as exc:
            raise ValueError(f"arguments of call '{call_id}' are not valid JSON: {exc}") from exc
        return cls(call_id=call_id, fn_name=fn_name, arguments=arguments)

    def to_dict(self) -> dict[str, Any]:
        return {"call_id": self.call_id, "fn_name": self.fn_name, "arguments": self.arguments}


@dataclass(frozen=True, slots=True)
class CallResponse:
    """Result of one invocation; ``content`` is always JSON text."""

    call_id: str
    content: str

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> CallResponse:
        return cls(call_id=data["call_id"], content=data["content"])

    @classmethod
    def from_error(cls, call_id: str, exc: DispatchError) -> CallResponse:
        """Render a dispatch failure as a JSON error document for the model."""

        return cls(call_id=call_id, content=json.dumps({"error": str(exc), "kind": exc.kind.value}))

    def to_dict(self) -> dict[str, Any]:
        return {"call_id": self.call_id, "content": self.content}

    def json(self) -> Any:
        return json.loads(self.content)


__all__ = ["CallRequest", "CallResponse", "ToolDescriptor"]
