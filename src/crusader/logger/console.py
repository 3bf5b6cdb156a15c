from __future__ import annotations

import logging
import sys

from rich.console import Console
from rich.logging import RichHandler

from crusader.env import get_logging_env


def _log_console() -> Console:
    # Looked up per handler so pytest's capsys sees the current stderr.
    return Console(file=sys.stderr, soft_wrap=True)


class ConsoleGateFilter(logging.Filter):
    """
    Drop console records when quiet mode is switched on after init.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        return not get_logging_env().quiet


def build_console_handler(level: int = logging.INFO) -> logging.Handler:
    handler = RichHandler(
        console=_log_console(),
        level=level,
        show_level=True,
        show_time=False,
        show_path=False,
        markup=False,
    )

    # RichHandler renders the level column; the formatter must not repeat it.
    handler.setFormatter(logging.Formatter("%(message)s"))

    handler.addFilter(ConsoleGateFilter())
    return handler
