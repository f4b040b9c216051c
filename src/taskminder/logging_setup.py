# src/taskminder/logging_setup.py

from __future__ import annotations

import logging
import sys
from pathlib import Path

LOG_FILE_NAME = "taskminder.log"

# Minimum level shown on the console, by logger-name prefix (longest match wins).
# Unlisted loggers fall back to ERROR so the REPL prompt stays readable.
_CONSOLE_THRESHOLDS: dict[str, int] = {
    "taskminder": logging.DEBUG,
    "taskminder.notifiers.matrix": logging.WARNING,
    "nio": logging.WARNING,
    "py.warnings": logging.ERROR,
}


class _ConsoleThresholdFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        return record.levelno >= console_threshold(record.name)


def console_threshold(logger_name: str) -> int:
    best, level = "", logging.ERROR
    for prefix, threshold in _CONSOLE_THRESHOLDS.items():
        if (logger_name == prefix or logger_name.startswith(prefix + ".")) and len(prefix) > len(best):
            best, level = prefix, threshold
    return level


def setup_logging(
    *,
    log_dir: str | Path = ".local/taskminder",
    console_level: int = logging.INFO,
    file_level: int = logging.DEBUG,
) -> Path:
    """
    Console (stderr, filtered per logger) plus a full log file under `log_dir`.

    Replaces any handlers already on the root logger. Returns the log file path.
    """
    log_file = Path(log_dir) / LOG_FILE_NAME
    log_file.parent.mkdir(parents=True, exist_ok=True)

    fmt = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)s %(threadName)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.addFilter(_ConsoleThresholdFilter())

    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setLevel(file_level)

    root = logging.getLogger()
    root.setLevel(min(console_level, file_level))
    for handler in list(root.handlers):
        root.removeHandler(handler)
    for handler in (console, file_handler):
        handler.setFormatter(fmt)
        root.addHandler(handler)

    logging.captureWarnings(True)
    return log_file
