import io
import json
import logging
from pathlib import Path

import pytest

from typed_tools import __version__, cli
from typed_tools.config import BatchPolicy, Settings
from typed_tools.logging import close_session_logger
from typed_tools.registry import ToolRegistry


def test_version_constant() -> None:
    assert __version__ == "0.1.0"


def test_list_default_registry(capsys) -> None:
    code = cli.main(["list"])
    assert code == 0
    out = capsys.readouterr().out
    assert "calculate: Perform basic arithmetic operations" in out
    assert "get_weather: Get the current weather for a location" in out


def test_default_command_is_list(capsys) -> None:
    assert cli.main([]) == 0
    assert "calculate" in capsys.readouterr().out


def test_list_json_and_openai(capsys) -> None:
    assert cli.main(["list", "--json"]) == 0
    descriptors = json.loads(capsys.readouterr().out)
    assert [d["name"] for d in descriptors] == ["calculate", "get_weather"]
    assert "properties" in descriptors[0]["schema"]

    assert cli.main(["list", "--openai"]) == 0
    tools = json.loads(capsys.readouterr().out)
    assert tools[0]["type"] == "function"
    assert tools[0]["function"]["name"] == "calculate"


def test_call_with_json_payload(capsys) -> None:
    code = cli.main(["call", "calculate", "--json", '{"a": 6, "b": 3, "operation": "divide"}', "--call-id", "x1"])
    assert code == 0
    out = json.loads(capsys.readouterr().out)
    assert out["call_id"] == "x1"
    assert json.loads(out["content"]) == {"result": 2.0}


def test_call_with_key_value_args(capsys) -> None:
    code = cli.main(["call", "get_weather", "--arg", "city=Paris", "--arg", "country=France", "--arg", "unit=F"])
    assert code == 0
    out = json.loads(capsys.readouterr().out)
    assert json.loads(out["content"])["unit"] == "°F"


@pytest.mark.parametrize(
    ("argv", "fragment"),
    [
        (["call", "ghost"], "tool 'ghost' not found"),
        (["call", "calculate", "--json", '{"a": 1}'], "invalid arguments for tool 'calculate'"),
        (["call", "calculate", "--json", '{"a": 1, "b": 0, "operation": "divide"}'], "Division by zero"),
        (["call", "calculate", "--json", "{oops"], "not valid JSON"),
        (["call", "calculate", "--json", "[1]"], "must be a JSON object"),
    ],
)
def test_call_failures_exit_nonzero(capsys, argv, fragment) -> None:
    assert cli.main(argv) == 1
    assert fragment in capsys.readouterr().err


def test_call_rejects_malformed_arg() -> None:
    with pytest.raises(SystemExit):
        cli.main(["call", "calculate", "--arg", "novalue"])


def test_batch_from_file(tmp_path: Path, capsys) -> None:
    requests = [
        {"call_id": "1", "fn_name": "calculate", "arguments": {"a": 1, "b": 2, "operation": "add"}},
        {"call_id": "2", "fn_name": "get_weather", "arguments": {"city": "Rome", "country": "Italy", "unit": "C"}},
    ]
    path = tmp_path / "batch.json"
    path.write_text(json.dumps(requests), encoding="utf-8")

    assert cli.main(["batch", str(path)]) == 0
    out = json.loads(capsys.readouterr().out)
    assert [item["call_id"] for item in out] == ["1", "2"]
    assert json.loads(out[0]["content"]) == {"result": 3.0}


def test_batch_from_stdin_failure(monkeypatch, capsys) -> None:
    payload = [
        {"call_id": "1", "fn_name": "calculate", "arguments": {"a": 1, "b": 2, "operation": "add"}},
        {"call_id": "2", "fn_name": "calculate", "arguments": {"a": 1, "b": 0, "operation": "divide"}},
    ]
    monkeypatch.setattr("sys.stdin", io.StringIO(json.dumps(payload)))

    assert cli.main(["batch", "-"]) == 1
    captured = capsys.readouterr()
    assert captured.out == ""
    assert "Division by zero" in captured.err


@pytest.mark.parametrize("content", ["{}", "[{\"fn_name\": \"calculate\"}]", "not json"])
def test_batch_rejects_bad_input(tmp_path: Path, capsys, content) -> None:
    path = tmp_path / "bad.json"
    path.write_text(content, encoding="utf-8")

    assert cli.main(["batch", str(path)]) == 1
    assert capsys.readouterr().err.startswith("error:")


def test_batch_missing_file(tmp_path: Path, capsys) -> None:
    assert cli.main(["batch", str(tmp_path / "missing.json")]) == 1
    assert "error:" in capsys.readouterr().err


@pytest.mark.parametrize("attr", ["registry", "tools", "make_registry"])
def test_registry_option_loads_module_attribute(capsys, attr) -> None:
    assert cli.main(["--registry", f"sample_registry:{attr}", "list"]) == 0
    assert capsys.readouterr().out.strip() == "shout: Upper-case the text"


@pytest.mark.parametrize("attr", ["not_tools", "number", "missing"])
def test_registry_option_rejects_bad_targets(capsys, attr) -> None:
    assert cli.main(["--registry", f"sample_registry:{attr}", "list"]) == 1
    assert "cannot load registry" in capsys.readouterr().err


def test_registry_option_unknown_module(capsys) -> None:
    assert cli.main(["--registry", "no_such_module_here:x", "list"]) == 1
    assert "cannot load registry" in capsys.readouterr().err


def test_build_registry_applies_settings() -> None:
    settings = Settings(batch_policy=BatchPolicy.DETACH, log_payload_chars=99)
    registry = cli.build_registry(settings)

    assert isinstance(registry, ToolRegistry)
    assert registry.batch_policy is BatchPolicy.DETACH
    assert registry.payload_chars == 99
    assert registry.names() == {"calculate", "get_weather"}


def test_build_registry_with_session_logger(_isolate_typed_tools_home: Path) -> None:
    registry = cli.build_registry(Settings(), session="cli-test")

    assert registry.logger is not None
    assert registry.logger.name == "typed_tools.registry.cli-test"
    assert (_isolate_typed_tools_home / "logs" / "cli-test.log").exists()
    close_session_logger("cli-test")


def test_session_flag_writes_registry_activity(_isolate_typed_tools_home: Path) -> None:
    code = cli.main(
        ["--session", "run-7", "--log-level", "debug", "call", "calculate", "--json", '{"a": 1, "b": 2, "operation": "add"}']
    )

    assert code == 0
    text = (_isolate_typed_tools_home / "logs" / "run-7.log").read_text()
    assert "session=run-7 tool request: calculate call_id=cli-1" in text
    assert "tool response: calculate" in text
    assert logging.getLogger("typed_tools.registry.run-7").handlers == []


def test_batch_policy_flag_reaches_registry(mocker) -> None:
    spy = mocker.spy(cli, "build_registry")

    assert cli.main(["--batch-policy", "detach", "list"]) == 0

    settings = spy.call_args.args[0]
    assert settings.batch_policy is BatchPolicy.DETACH


def test_config_path(capsys, _isolate_typed_tools_home: Path) -> None:
    assert cli.main(["config", "path"]) == 0
    assert capsys.readouterr().out.strip() == str(_isolate_typed_tools_home / "config.toml")


def test_config_print(capsys) -> None:
    assert cli.main(["--log-level", "debug", "config", "print"]) == 0
    out = json.loads(capsys.readouterr().out)
    assert out["log_level"] == "debug"
    assert out["batch_policy"] == "cancel"


def test_build_registry_does_not_consume_loaded_registry() -> None:
    import sample_registry

    cli.build_registry(Settings(registry="sample_registry:registry"))
    cli.build_registry(Settings(registry="sample_registry:registry"))

    assert sample_registry.registry.names() == {"shout"}


def test_call_key_value_args_parse_json_scalars(capsys) -> None:
    code = cli.main(["call", "calculate", "--arg", "a=7", "--arg", "b=2", "--arg", "operation=subtract"])
    assert code == 0
    out = json.loads(capsys.readouterr().out)
    assert json.loads(out["content"]) == {"result": 5.0}


def test_batch_accepts_argument_text(tmp_path, capsys) -> None:
    path = tmp_path / "calls.json"
    path.write_text(
        json.dumps([{"call_id": "t", "fn_name": "calculate", "arguments": '{"a": 2, "b": 2, "operation": "multiply"}'}])
    )

    assert cli.main(["batch", str(path)]) == 0
    out = json.loads(capsys.readouterr().out)
    assert json.loads(out[0]["content"]) == {"result": 4.0}
