"""Common path utilities for typed-tools."""

from __future__ import annotations

import os
from pathlib import Path


def get_typed_tools_home() -> Path:
    """Return the base typed-tools directory, honoring TYPED_TOOLS_HOME if set."""

    env_path = os.environ.get("TYPED_TOOLS_HOME")
    return Path(env_path).expanduser() if env_path else Path.home() / ".typed-tools"


__all__ = ["get_typed_tools_home"]
