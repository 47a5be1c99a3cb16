"""Session logs for registry activity.

A session (one CLI run, or one host conversation) can mirror what a
``ToolRegistry`` logs (requests, responses, failures, abandoned batch calls)
into ``<home>/logs/<session>.log``. Every record is stamped with the session id
so logs from several sessions stay distinguishable once collected together.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from typed_tools.config import LogLevel
from typed_tools.paths import get_typed_tools_home

SESSION_LOGGER_PREFIX = "typed_tools.registry"
SESSION_LOG_FORMAT = "%(asctime)s %(levelname)s session=%(session_id)s %(message)s"


def session_log_path(session_id: str, base_dir: Path | None = None) -> Path:
    directory = base_dir if base_dir is not None else get_typed_tools_home() / "logs"
    return directory / f"{session_id}.log"


def session_logger_name(session_id: str) -> str:
    return f"{SESSION_LOGGER_PREFIX}.{session_id}"


class SessionFilter(logging.Filter):
    """Attach ``session_id`` to every record passing through the session logger."""

    def __init__(self, session_id: str) -> None:
        super().__init__()
        self.session_id = session_id

    def filter(self, record: logging.LogRecord) -> bool:
        record.session_id = self.session_id
        return True


def configure_session_logger(
    session_id: str,
    *,
    log_level: LogLevel | str = LogLevel.INFO,
    base_dir: Path | None = None,
) -> logging.Logger:
    """Return the registry logger for ``session_id``, writing to its session log.

    The logger does not propagate. Calling again for the same session reuses the
    open file, unless ``base_dir`` points elsewhere, in which case the old file
    is closed and the new one takes over.
    """

    logger = logging.getLogger(session_logger_name(session_id))
    level = to_logging_level(log_level)
    logger.setLevel(level)
    logger.propagate = False

    path = os.path.abspath(session_log_path(session_id, base_dir))
    current = [h for h in logger.handlers if isinstance(h, logging.FileHandler)]
    if current and all(h.baseFilename == path for h in current):
        for handler in current:
            handler.setLevel(level)
        return logger

    close_session_logger(session_id)
    Path(path).parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setLevel(level)
    handler.addFilter(SessionFilter(session_id))
    handler.setFormatter(logging.Formatter(SESSION_LOG_FORMAT))
    logger.addHandler(handler)
    return logger


def close_session_logger(session_id: str) -> None:
    """Flush and detach the session's handlers; the log file stays on disk."""

    logger = logging.getLogger(session_logger_name(session_id))
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()


def to_logging_level(value: LogLevel | str) -> int:
    """Map a configured level to a ``logging`` constant; unknown values give WARNING."""

    if not isinstance(value, LogLevel):
        try:
            value = LogLevel(str(value).lower())
        except ValueError:
            return logging.WARNING
    return logging.getLevelNamesMapping()[value.value.upper()]


__all__ = [
    "SESSION_LOG_FORMAT",
    "SessionFilter",
    "close_session_logger",
    "configure_session_logger",
    "session_log_path",
    "session_logger_name",
    "to_logging_level",
]
