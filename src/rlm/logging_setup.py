"""Logger wiring for the monitor.

All handlers are attached to the ``rlm`` logger here and nowhere else. The
terminal belongs to the table sink, so without an error log records are
dropped instead of reaching stderr.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

ROOT_LOGGER = "rlm"
LEVEL_ENV = "RLM_LOG_LEVEL"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y/%m/%d %H:%M:%S"


@dataclass(frozen=True, slots=True)
class LoggingRuntime:
    level_name: str
    level: int
    file_path: str


def _parse_level(raw: str | None) -> tuple[str, int]:
    normalized = str(raw or "INFO").strip().upper()
    level = getattr(logging, normalized, None)
    if not isinstance(level, int):
        level = logging.INFO
    return logging.getLevelName(level), level


def _make_file_handler(level: int, file_path: Path) -> logging.Handler:
    handler = logging.FileHandler(file_path, mode="a", encoding="utf-8")
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    return handler


def configure(error_log: Path | None = None) -> LoggingRuntime:
    """Attach the error log (or a null handler) to the ``rlm`` logger.

    Raises ``OSError`` when the log file can't be opened.
    """
    level_name, level = _parse_level(os.environ.get(LEVEL_ENV))
    root = logging.getLogger(ROOT_LOGGER)
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()
    if error_log is None:
        root.addHandler(logging.NullHandler())
        file_path = ""
    else:
        root.addHandler(_make_file_handler(level, error_log))
        file_path = str(error_log)
    root.setLevel(level)
    root.propagate = False
    return LoggingRuntime(level_name=level_name, level=level, file_path=file_path)
