"""Configuration models and enums for typed-tools.

Settings resolve with precedence CLI overrides > environment > TOML file >
defaults.
"""

from __future__ import annotations

import os
import stat
import tomllib
from collections.abc import Mapping
from enum import Enum
from pathlib import Path
from typing import Any, cast

from pydantic import BaseModel, ConfigDict, field_validator

from typed_tools.paths import get_typed_tools_home


class LogLevel(str, Enum):
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class BatchPolicy(str, Enum):
    """What happens to still-running batch calls once one call has failed."""

    CANCEL = "cancel"
    DETACH = "detach"


DEFAULT_PAYLOAD_CHARS = 2000
EXPECTED_FILE_MODE = stat.S_IRUSR | stat.S_IWUSR  # 0o600


class Settings(BaseModel):
    """Resolved typed-tools settings."""

    model_config = ConfigDict(frozen=True, validate_default=True, extra="forbid")

    log_level: LogLevel = LogLevel.INFO
    log_payload_chars: int = DEFAULT_PAYLOAD_CHARS
    batch_policy: BatchPolicy = BatchPolicy.CANCEL
    registry: str | None = None

    @field_validator("log_payload_chars")
    @classmethod
    def _validate_payload_chars(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("log_payload_chars must be positive")
        return value

    @field_validator("registry")
    @classmethod
    def _validate_registry(cls, value: str | None) -> str | None:
        if value is None:
            return None
        stripped = value.strip()
        if not stripped:
            return None
        if ":" not in stripped:
            raise ValueError("registry must look like 'package.module:attribute'")
        return stripped


def default_config_path() -> Path:
    return get_typed_tools_home() / "config.toml"


def load_settings(
    cli_overrides: Mapping[str, Any] | None = None,
    env: Mapping[str, str] | None = None,
    config_path: Path | str | None = None,
    *,
    create_if_missing: bool = False,
) -> Settings:
    env = os.environ if env is None else env
    cli_overrides = cli_overrides or {}
    path = Path(config_path) if config_path else default_config_path()

    if not path.exists() and create_if_missing:
        write_config(Settings(), path)

    config_data: dict[str, Any] = {}
    if path.exists():
        _ensure_permissions(path)
        config_data = _read_toml(path)

    defaults = Settings()

    log_level = _first_value(
        _clean_str(cli_overrides.get("log_level")),
        _clean_str(env.get("TYPED_TOOLS_LOG_LEVEL")),
        _clean_str(_get_config_value(config_data, "logging", "log_level")),
    )

    payload_chars = _first_value(
        cli_overrides.get("log_payload_chars"),
        _get_config_value(config_data, "logging", "payload_chars"),
        defaults.log_payload_chars,
    )

    batch_policy = _first_value(
        _clean_str(cli_overrides.get("batch_policy")),
        _clean_str(env.get("TYPED_TOOLS_BATCH_POLICY")),
        _clean_str(_get_config_value(config_data, "runtime", "batch_policy")),
    )

    registry = _first_value(
        _clean_str(cli_overrides.get("registry")),
        _clean_str(env.get("TYPED_TOOLS_REGISTRY")),
        _clean_str(_get_config_value(config_data, "runtime", "registry")),
        defaults.registry,
    )

    log_level_val = cast(LogLevel, _coerce_enum(log_level, LogLevel, defaults.log_level))
    batch_policy_val = cast(BatchPolicy, _coerce_enum(batch_policy, BatchPolicy, defaults.batch_policy))

    return Settings(
        log_level=log_level_val,
        log_payload_chars=payload_chars,
        batch_policy=batch_policy_val,
        registry=registry,
    )


def write_config(settings: Settings, config_path: Path | str | None = None) -> Path:
    path = Path(config_path) if config_path else default_config_path()
    path.parent.mkdir(parents=True, exist_ok=True)

    sections: list[str] = []
    _append_section(
        sections,
        "logging",
        {"log_level": settings.log_level, "payload_chars": settings.log_payload_chars},
    )
    _append_section(
        sections,
        "runtime",
        {"batch_policy": settings.batch_policy, "registry": settings.registry},
    )

    content = "\n\n".join(filter(None, sections)) + "\n"
    path.write_text(content, encoding="utf-8")
    path.chmod(EXPECTED_FILE_MODE)
    return path


def _ensure_permissions(path: Path) -> None:
    current_mode = stat.S_IMODE(path.stat().st_mode)
    if current_mode != EXPECTED_FILE_MODE:
        path.chmod(EXPECTED_FILE_MODE)


def _read_toml(path: Path) -> dict[str, Any]:
    with path.open("rb") as handle:
        return tomllib.load(handle)


def _get_config_value(config: Mapping[str, Any], section: str, key: str) -> Any:
    section_data = config.get(section)
    if not isinstance(section_data, dict):
        return None
    return section_data.get(key)


def _clean_str(value: Any) -> Any:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped if stripped else None
    return value


def _first_value(*candidates: Any) -> Any:
    for candidate in candidates:
        if candidate is not None:
            return candidate
    return None


def _coerce_enum(value: Any, enum_cls: type[Enum], default: Enum | None = None) -> Enum | None:
    if value is None:
        return default
    if isinstance(value, enum_cls):
        return value
    if isinstance(value, str):
        try:
            return enum_cls(value)
        except ValueError:
            return default
    return default


def _append_section(parts: list[str], name: str, values: Mapping[str, Any]) -> None:
    filtered = {k: v for k, v in values.items() if v is not None}
    if not filtered:
        return
    lines = [f"[{name}]"]
    for key, val in filtered.items():
        if isinstance(val, Enum):
            lines.append(f'{key} = "{val.value}"')
        elif isinstance(val, str):
            escaped = val.replace("\\", "\\\\").replace('"', '\\"')
            lines.append(f'{key} = "{escaped}"')
        else:
            lines.append(f"{key} = {val}")
    parts.append("\n".join(lines))


__all__ = [
    "BatchPolicy",
    "DEFAULT_PAYLOAD_CHARS",
    "LogLevel",
    "Settings",
    "default_config_path",
    "load_settings",
    "write_config",
]
