from __future__ import annotations

import logging
import os
from datetime import datetime
from pathlib import Path

from crusader.env import get_logging_env, module_logs_dir
from crusader.logger.console import build_console_handler
from crusader.logger.file import open_run_log, run_log_glob, run_log_name
from crusader.logger.retention import enforce_retention
from crusader.logger.state import STATE


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def _level_to_int(level: str | int) -> int:
    if isinstance(level, int):
        return level
    lvl = logging.getLevelName(str(level).upper())
    return lvl if isinstance(lvl, int) else logging.INFO


def _ensure_run_id() -> str:
    run_id = os.environ.get("CRUSADER_RUN_ID")
    if not run_id:
        run_id = datetime.now().strftime("%Y-%m-%d_%H-%M-%S")
        os.environ["CRUSADER_RUN_ID"] = run_id
    return run_id


def _target_logfile() -> tuple[str, Path]:
    command = os.environ.get("CRUSADER_COMMAND") or "run"
    run_id = _ensure_run_id()
    return command, module_logs_dir(command) / run_log_name(command, run_id)


def _squelch_noisy_loggers() -> None:
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("requests").setLevel(logging.WARNING)


def init_logging() -> None:
    """
    Initialize logging for the entire process.

    - Handlers are attached ONLY to the root logger.
    - Named loggers inherit via propagation.
    - Safe to call multiple times; file handler is repointed, not stacked.
    """
    env = get_logging_env()
    _squelch_noisy_loggers()

    root = logging.getLogger()
    command, logfile = _target_logfile()

    log_dir = logfile.parent
    log_dir.mkdir(parents=True, exist_ok=True)
    enforce_retention(log_dir, int(env.log_retention), run_log_glob(command))

    # Base level from env, but verbose forces DEBUG everywhere.
    root_level = logging.DEBUG if env.verbose else _level_to_int(env.log_level)

    if STATE.initialized and STATE.log_file_path == logfile:
        root.setLevel(root_level)
        return

    existing_file: logging.FileHandler | None = None
    for h in list(root.handlers):
        if isinstance(h, logging.FileHandler):
            existing_file = h
            break

    root.handlers.clear()
    root.setLevel(root_level)

    root.addHandler(open_run_log(logfile, existing_file))

    # Console handler (Rich) only when not quiet. Verdict lines go through
    # the status sink, not through logging.
    if not env.quiet:
        root.addHandler(build_console_handler(root_level))

    STATE.initialized = True
    STATE.run_id = os.environ.get("CRUSADER_RUN_ID")
    STATE.log_dir = log_dir
    STATE.log_file_path = logfile
