"""Build tools from plain async functions.

``tool_function`` turns ``async def fn(params: P) -> O`` into a ``Tool`` whose
input/output types are read from the function's annotations, so no
hand-written ``Tool`` subclass is needed::

    @tool_function(name="get_weather", description="Get the current weather")
    async def get_weather(params: WeatherInput) -> WeatherOutput:
        ...

    registry.register(get_weather)
"""

from __future__ import annotations

import inspect
import typing
from collections.abc import Awaitable, Callable
from typing import Any, overload

from typed_tools.tools.base import Tool

ToolCallable = Callable[[Any], Awaitable[Any]]


class FunctionTool(Tool[Any, Any]):
    """Tool backed by a single-argument coroutine function."""

    def __init__(
        self,
        fn: ToolCallable,
        *,
        name: str | None = None,
        description: str | None = None,
        errors: type[Exception] | tuple[type[Exception], ...] = Exception,
    ) -> None:
        input_model, output_model = _signature_types(fn)
        self.fn = fn
        tool_name = name or fn.__name__
        self.name = tool_name  # type: ignore[misc]
        self.description = description or f"Tool function: {tool_name}"  # type: ignore[misc]
        self.InputModel = input_model  # type: ignore[misc]
        self.OutputModel = output_model  # type: ignore[misc]
        self.Error = errors  # type: ignore[misc]

    async def call(self, params: Any) -> Any:
        return await self.fn(params)

    def __repr__(self) -> str:
        return f"FunctionTool(name={self.name!r})"


def _signature_types(fn: ToolCallable) -> tuple[Any, Any]:
    if not inspect.iscoroutinefunction(fn):
        raise TypeError(f"tool function {getattr(fn, '__name__', fn)!r} must be async")

    parameters = list(inspect.signature(fn).parameters.values())
    if len(parameters) != 1:
        raise TypeError(f"tool function {fn.__name__!r} must take exactly one parameter")

    hints = typing.get_type_hints(fn)
    param = parameters[0]
    if param.name not in hints:
        raise TypeError(f"tool function {fn.__name__!r} parameter {param.name!r} must be annotated")

    return hints[param.name], hints.get("return", Any)


@overload
def tool_function(fn: ToolCallable, /) -> FunctionTool: ...


@overload
def tool_function(
    *,
    name: str | None = None,
    description: str | None = None,
    errors: type[Exception] | tuple[type[Exception], ...] = Exception,
) -> Callable[[ToolCallable], FunctionTool]: ...


def tool_function(
    fn: ToolCallable | None = None,
    /,
    *,
    name: str | None = None,
    description: str | None = None,
    errors: type[Exception] | tuple[type[Exception], ...] = Exception,
) -> FunctionTool | Callable[[ToolCallable], FunctionTool]:
    """Decorator form of ``FunctionTool``; usable bare or with keyword arguments."""

    def decorator(func: ToolCallable) -> FunctionTool:
        return FunctionTool(func, name=name, description=description, errors=errors)

    if fn is not None:
        return decorator(fn)
    return decorator


__all__ = ["FunctionTool", "tool_function"]
