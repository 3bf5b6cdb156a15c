"""
Per-run log file.

Every invocation writes <logs>/<command>/<command>-<run_id>.log. Build
workers share the one handler, so each record carries its thread name.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

LOG_FORMAT = "%(asctime)s | [%(levelname)s] | %(threadName)s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def run_log_name(command: str, run_id: str) -> str:
    return f"{command}-{run_id}.log"


def run_log_glob(command: str) -> str:
    """Retention pattern matching every run log of `command`."""
    return f"{command}-*.log"


def open_run_log(
    logfile: Path, existing: Optional[logging.FileHandler] = None
) -> logging.FileHandler:
    """
    Handler writing to `logfile`.

    An existing handler is moved to the new file rather than replaced, so
    loggers holding it keep working after a second init_logging().
    """
    logfile.parent.mkdir(parents=True, exist_ok=True)

    if existing is None:
        handler = logging.FileHandler(logfile, encoding="utf-8")
        handler.setLevel(logging.NOTSET)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
        return handler

    target = os.path.abspath(logfile)
    if existing.baseFilename == target:
        return existing

    existing.acquire()
    try:
        existing.close()
        existing.baseFilename = target
        existing.stream = existing._open()
    finally:
        existing.release()
    return existing
