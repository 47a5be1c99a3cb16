"""Demonstration tools used by the CLI when no registry is configured."""

from __future__ import annotations

import asyncio
from enum import Enum

from pydantic import Field

from typed_tools.registry import ToolRegistry
from typed_tools.tools.base import Tool, ToolError, ToolRequest, ToolResponse
from typed_tools.tools.function import tool_function

SIMULATED_LATENCY = 0.05


class TemperatureUnit(str, Enum):
    CELSIUS = "C"
    FAHRENHEIT = "F"


class WeatherInput(ToolRequest):
    city: str = Field(description="The city name.")
    country: str = Field(description="The country of the city.")
    unit: TemperatureUnit = Field(description="Temperature unit (C for Celsius, F for Fahrenheit).")


class WeatherOutput(ToolResponse):
    temperature: float
    condition: str
    humidity: int
    unit: str


class WeatherError(ToolError):
    pass


@tool_function(name="get_weather", description="Get the current weather for a location", errors=WeatherError)
async def get_weather(params: WeatherInput) -> WeatherOutput:
    if not params.city.strip():
        raise WeatherError(f"City not found: {params.city!r}")

    await asyncio.sleep(SIMULATED_LATENCY)

    if params.unit is TemperatureUnit.CELSIUS:
        return WeatherOutput(temperature=22.5, condition="Sunny", humidity=65, unit="°C")
    return WeatherOutput(temperature=72.5, condition="Sunny", humidity=65, unit="°F")


class Operation(str, Enum):
    ADD = "add"
    SUBTRACT = "subtract"
    MULTIPLY = "multiply"
    DIVIDE = "divide"


class CalculateInput(ToolRequest):
    a: float = Field(description="First number.")
    b: float = Field(description="Second number.")
    operation: Operation = Field(description="Operation to perform.")


class CalculateOutput(ToolResponse):
    result: float


class CalculateError(ToolError):
    pass


class CalculateTool(Tool[CalculateInput, CalculateOutput]):
    name = "calculate"
    description = "Perform basic arithmetic operations"
    InputModel = CalculateInput
    OutputModel = CalculateOutput
    Error = CalculateError

    async def call(self, params: CalculateInput) -> CalculateOutput:
        if params.operation is Operation.ADD:
            value = params.a + params.b
        elif params.operation is Operation.SUBTRACT:
            value = params.a - params.b
        elif params.operation is Operation.MULTIPLY:
            value = params.a * params.b
        else:
            if params.b == 0:
                raise CalculateError("Division by zero")
            value = params.a / params.b
        return CalculateOutput(result=value)


def default_registry() -> ToolRegistry:
    return ToolRegistry().register_all([get_weather, CalculateTool()])


__all__ = [
    "CalculateError",
    "CalculateInput",
    "CalculateOutput",
    "CalculateTool",
    "Operation",
    "TemperatureUnit",
    "WeatherError",
    "WeatherInput",
    "WeatherOutput",
    "default_registry",
    "get_weather",
]
