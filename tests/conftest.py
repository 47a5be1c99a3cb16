import asyncio
import pathlib
import shutil
import sys
from typing import Any

import pytest
from pydantic import Field

PROJECT_ROOT = pathlib.Path(__file__).resolve().parents[1]
SRC_PATH = PROJECT_ROOT / "src"

# Ensure src/ is importable when running tests without installing the package.
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

from typed_tools.tools.base import Tool, ToolError, ToolRequest, ToolResponse  # noqa: E402


@pytest.fixture(autouse=True)
def _isolate_typed_tools_home(monkeypatch: pytest.MonkeyPatch, tmp_path: pathlib.Path):
    """Point TYPED_TOOLS_HOME at a per-test sandbox so we never touch the real home."""

    home = tmp_path / "typed-tools-home"
    if home.exists():
        shutil.rmtree(home, ignore_errors=True)
    home.mkdir(parents=True, exist_ok=True)
    monkeypatch.setenv("TYPED_TOOLS_HOME", str(home))
    for var in ("TYPED_TOOLS_LOG_LEVEL", "TYPED_TOOLS_BATCH_POLICY", "TYPED_TOOLS_REGISTRY"):
        monkeypatch.delenv(var, raising=False)
    yield home


class EchoRequest(ToolRequest):
    msg: str = Field(description="Message to echo.")
    times: int | None = Field(default=None, description="Repeat count.")


class EchoResponse(ToolResponse):
    msg: str


class EchoTool(Tool[EchoRequest, EchoResponse]):
    name = "echo"
    description = "echo upper"
    InputModel = EchoRequest
    OutputModel = EchoResponse

    async def call(self, params: EchoRequest) -> EchoResponse:
        if params.msg == "boom":
            raise ToolError("echo refused: boom")
        return EchoResponse(msg=params.msg.upper() * (params.times or 1))


class ConstTool(Tool[dict, int]):
    """Tool returning a fixed value under a configurable name."""

    description = "constant"
    InputModel = dict
    OutputModel = int

    def __init__(self, name: str, value: int) -> None:
        self.name = name  # type: ignore[misc]
        self.value = value

    async def call(self, params: dict) -> int:
        return self.value


class SleepRequest(ToolRequest):
    label: str
    delay: float = 0.0
    fail: bool = False


class SleepTool(Tool[SleepRequest, str]):
    """Sleeps for ``delay`` seconds and records start/finish order."""

    name = "sleep"
    description = "sleep then answer"
    InputModel = SleepRequest
    OutputModel = str

    def __init__(self) -> None:
        self.started: list[str] = []
        self.finished: list[str] = []
        self.cancelled: list[str] = []

    async def call(self, params: SleepRequest) -> str:
        self.started.append(params.label)
        try:
            await asyncio.sleep(params.delay)
        except asyncio.CancelledError:
            self.cancelled.append(params.label)
            raise
        if params.fail:
            raise ToolError(f"{params.label} failed")
        self.finished.append(params.label)
        return params.label


@pytest.fixture
def dummy_tool_classes():
    """Provide simple Tool-friendly classes for reuse."""

    return EchoRequest, EchoResponse, EchoTool


@pytest.fixture
def const_tool() -> type[ConstTool]:
    return ConstTool


@pytest.fixture
def sleep_tool() -> SleepTool:
    return SleepTool()


class FakeLogger:
    """Lightweight in-memory fake logger that records calls."""

    def __init__(self, name: str = "fake") -> None:
        self.name = name
        self.info_calls: list[tuple[tuple[Any, ...], dict[str, Any]]] = []
        self.debug_calls: list[tuple[tuple[Any, ...], dict[str, Any]]] = []
        self.warning_calls: list[tuple[tuple[Any, ...], dict[str, Any]]] = []
        self.error_calls: list[tuple[tuple[Any, ...], dict[str, Any]]] = []

    def info(self, *args: Any, **kwargs: Any) -> None:
        self.info_calls.append((args, kwargs))

    def debug(self, *args: Any, **kwargs: Any) -> None:
        self.debug_calls.append((args, kwargs))

    def warning(self, *args: Any, **kwargs: Any) -> None:
        self.warning_calls.append((args, kwargs))

    def error(self, *args: Any, **kwargs: Any) -> None:
        self.error_calls.append((args, kwargs))


@pytest.fixture
def fake_logger() -> type[FakeLogger]:
    """Provide FakeLogger class for use in registries."""
    return FakeLogger
