"""Error taxonomy for tool dispatch.

Every failure surfaced by ``ToolRegistry.execute``/``execute_batch`` is a
``DispatchError``. Unknown tools raise ``ToolNotFoundError``; failures inside a
handler raise one of the ``InvocationError`` subclasses. None of them are
retried by the registry.
"""

from __future__ import annotations

from enum import Enum

from pydantic import ValidationError


class ErrorKind(str, Enum):
    NOT_FOUND = "not_found"
    DECODE = "decode"
    HANDLER = "handler"
    ENCODE = "encode"


class DispatchError(Exception):
    """Base class for tool dispatch failures."""

    kind: ErrorKind
    retryable: bool = False


class ToolNotFoundError(DispatchError):
    """Raised when a call names a tool that is not registered."""

    kind = ErrorKind.NOT_FOUND

    def __init__(self, name: str) -> None:
        super().__init__(f"tool '{name}' not found in registry")
        self.name = name


class InvocationError(DispatchError):
    """Raised when a registered tool fails to decode, run, or encode."""

    def __init__(self, tool_name: str, message: str) -> None:
        super().__init__(message)
        self.tool_name = tool_name
        self.message = message


class DecodeError(InvocationError):
    """Arguments did not match the tool's parameter schema."""

    kind = ErrorKind.DECODE

    def __init__(self, tool_name: str, message: str, *, fields: tuple[str, ...] = ()) -> None:
        super().__init__(tool_name, message)
        self.fields = fields

    @classmethod
    def from_validation_error(cls, tool_name: str, exc: ValidationError) -> DecodeError:
        fields: list[str] = []
        problems: list[str] = []
        for item in exc.errors(include_url=False):
            location = ".".join(str(part) for part in item.get("loc", ()))
            if location and location not in fields:
                fields.append(location)
            problems.append(f"{location}: {item.get('msg')}" if location else str(item.get("msg")))
        detail = "; ".join(problems) or str(exc)
        return cls(tool_name, f"invalid arguments for tool '{tool_name}': {detail}", fields=tuple(fields))


class HandlerError(InvocationError):
    """The tool itself reported a domain failure; ``message`` is its own text."""

    kind = ErrorKind.HANDLER


class EncodeError(InvocationError):
    """The tool's result could not be serialized to JSON."""

    kind = ErrorKind.ENCODE


__all__ = [
    "DecodeError",
    "DispatchError",
    "EncodeError",
    "ErrorKind",
    "HandlerError",
    "InvocationError",
    "ToolNotFoundError",
]
