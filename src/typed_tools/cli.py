"""Console entrypoint for typed-tools.

Lists the tools of a registry and executes single or batched calls against it,
which is handy for checking tool schemas and behavior without a model in the
loop. The registry comes from ``--registry module:attr`` (or the config file)
and defaults to the bundled example tools.
"""

from __future__ import annotations

import argparse
import asyncio
import importlib
import json
import logging
import sys
from collections.abc import Iterable
from typing import Any

from typed_tools import __version__
from typed_tools.config import BatchPolicy, LogLevel, Settings, default_config_path, load_settings
from typed_tools.errors import DispatchError
from typed_tools.examples import default_registry
from typed_tools.logging import close_session_logger, configure_session_logger, to_logging_level
from typed_tools.registry import ToolRegistry
from typed_tools.tools.base import Tool
from typed_tools.types import CallRequest


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="typed-tools",
        description="Inspect and invoke typed tools through their JSON interface",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
        help="Show version and exit.",
    )
    parser.add_argument(
        "--log-level",
        choices=[e.value for e in LogLevel],
        dest="log_level",
        help="Log level override",
    )
    parser.add_argument(
        "--batch-policy",
        choices=[e.value for e in BatchPolicy],
        dest="batch_policy",
        help="What to do with running calls when a batch fails",
    )
    parser.add_argument("--registry", help="Registry to load, as 'package.module:attribute'")
    parser.add_argument("--session", help="Also write registry activity to the named session log")
    parser.add_argument("--config-path", dest="config_path", help="Path to config.toml")

    subparsers = parser.add_subparsers(dest="command")

    list_parser = subparsers.add_parser("list", help="List registered tools (default)")
    list_parser.add_argument("--json", dest="as_json", action="store_true", help="Print full descriptors as JSON")
    list_parser.add_argument("--openai", action="store_true", help="Print descriptors as OpenAI function tools")

    call_parser = subparsers.add_parser("call", help="Invoke a single tool")
    call_parser.add_argument("name", help="Tool name")
    call_parser.add_argument("--json", dest="json_payload", help="JSON payload with tool arguments")
    call_parser.add_argument("--arg", action="append", default=[], help="key=value pairs for tool args")
    call_parser.add_argument("--call-id", dest="call_id", default="cli-1", help="Call id echoed in the response")

    batch_parser = subparsers.add_parser("batch", help="Invoke a JSON array of call requests concurrently")
    batch_parser.add_argument("path", help="File holding the requests, or '-' for stdin")

    config_parser = subparsers.add_parser("config", help="Config helpers")
    config_sub = config_parser.add_subparsers(dest="config_cmd", required=True)
    config_sub.add_parser("path", help="Print config path")
    config_sub.add_parser("print", help="Print resolved settings")

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    settings = load_settings(cli_overrides=_collect_overrides(args), config_path=args.config_path)
    _configure_base_logging(settings.log_level)

    command = args.command or "list"
    if command == "config":
        return _run_config(settings, args)

    try:
        registry = build_registry(settings, session=args.session)
    except (ImportError, AttributeError, TypeError, ValueError) as exc:
        print(f"error: cannot load registry: {exc}", file=sys.stderr)
        return 1

    try:
        if command == "list":
            return _run_list(registry, args)
        if command == "call":
            return _run_call(registry, args)
        if command == "batch":
            return _run_batch(registry, args)
    finally:
        if args.session:
            close_session_logger(args.session)

    parser.error(f"unknown command {command}")
    return 1


def build_registry(settings: Settings, *, session: str | None = None) -> ToolRegistry:
    """Create a registry configured from ``settings`` and fill it with tools."""

    logger = (
        configure_session_logger(session, log_level=settings.log_level)
        if session
        else logging.getLogger("typed_tools.cli")
    )
    registry = ToolRegistry.from_settings(settings, logger=logger)
    if not settings.registry:
        return registry.merge(default_registry())
    # the loaded registry may be a module-level object; copy rather than consume it
    source = load_registry(settings.registry)
    return registry.register_all(handler.tool for handler in source.handlers())


def load_registry(target: str) -> ToolRegistry:
    """Resolve ``module:attr`` into a registry.

    The attribute may be a ``ToolRegistry``, a zero-argument callable returning
    one, or an iterable of tools.
    """

    module_name, _, attr = target.partition(":")
    if not module_name or not attr:
        raise ValueError(f"registry must look like 'package.module:attribute', got {target!r}")

    obj: Any = getattr(importlib.import_module(module_name), attr)
    if callable(obj) and not isinstance(obj, ToolRegistry | Tool):
        obj = obj()
    if isinstance(obj, ToolRegistry):
        return obj
    if isinstance(obj, Iterable):
        tools = list(obj)
        bad = [tool for tool in tools if not isinstance(tool, Tool)]
        if bad:
            raise TypeError(f"{target} yielded non-tool objects: {bad!r}")
        return ToolRegistry().register_all(tools)
    raise TypeError(f"{target} is neither a ToolRegistry nor an iterable of tools")


def _run_list(registry: ToolRegistry, args: argparse.Namespace) -> int:
    descriptors = sorted(registry.descriptors(), key=lambda d: d.name)
    if args.openai:
        print(json.dumps([d.to_openai_tool() for d in descriptors], indent=2))
        return 0
    if args.as_json:
        print(json.dumps([d.to_dict() for d in descriptors], indent=2))
        return 0
    for descriptor in descriptors:
        print(f"{descriptor.name}: {descriptor.description}")
    return 0


def _run_call(registry: ToolRegistry, args: argparse.Namespace) -> int:
    payload: dict[str, Any] = {}
    if args.json_payload:
        try:
            payload = json.loads(args.json_payload)
        except json.JSONDecodeError as exc:
            print(f"error: --json is not valid JSON: {exc}", file=sys.stderr)
            return 1
        if not isinstance(payload, dict):
            print("error: --json must be a JSON object", file=sys.stderr)
            return 1
    for pair in args.arg:
        if "=" not in pair:
            raise SystemExit("--arg expects key=value")
        key, value = pair.split("=", 1)
        payload[key] = _parse_arg_value(value)

    request = CallRequest(call_id=args.call_id, fn_name=args.name, arguments=payload)
    try:
        response = asyncio.run(registry.execute(request))
    except DispatchError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    print(json.dumps(response.to_dict(), indent=2))
    return 0


def _parse_arg_value(value: str) -> Any:
    # numbers, booleans and null are taken as JSON, anything else as a plain string
    try:
        return json.loads(value)
    except json.JSONDecodeError:
        return value


def _run_batch(registry: ToolRegistry, args: argparse.Namespace) -> int:
    try:
        raw = sys.stdin.read() if args.path == "-" else _read_text(args.path)
        data = json.loads(raw)
        if not isinstance(data, list):
            raise ValueError("batch input must be a JSON array of call requests")
        requests = [CallRequest.from_dict(item) for item in data]
    except (OSError, TypeError, ValueError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    try:
        responses = asyncio.run(registry.execute_batch(requests))
    except DispatchError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    print(json.dumps([response.to_dict() for response in responses], indent=2))
    return 0


def _read_text(path: str) -> str:
    with open(path, encoding="utf-8") as handle:
        return handle.read()


def _run_config(settings: Settings, args: argparse.Namespace) -> int:
    if args.config_cmd == "path":
        print(args.config_path or default_config_path())
        return 0
    if args.config_cmd == "print":
        print(settings.model_dump_json(indent=2))
        return 0
    return 1


def _collect_overrides(args: argparse.Namespace) -> dict[str, Any]:
    return {
        "log_level": args.log_level,
        "batch_policy": args.batch_policy,
        "registry": args.registry,
    }


def _configure_base_logging(level: LogLevel | str) -> None:
    logging.basicConfig(
        level=logging.WARNING,
        stream=sys.__stderr__,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        force=True,
    )
    logging.getLogger("typed_tools").setLevel(to_logging_level(level))


if __name__ == "__main__":
    sys.exit(main())
