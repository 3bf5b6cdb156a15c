from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Iterator, Optional

from rich.console import Console
from rich.text import Text

from crusader.logger import get_logger
from crusader.ui.console import build_console

logger = get_logger(__name__)

STATUS_HEADER = "crusader: "


class StatusSink:
    """
    Shared console output for all worker threads.

    Every line is the header, the message and a newline, written while the
    sink's lock is held, so lines from concurrent workers never interleave.
    """

    def __init__(self, console: Optional[Console] = None) -> None:
        self.console = console or build_console()
        self._lock = threading.Lock()

    @contextmanager
    def line(self) -> Iterator[Text]:
        with self._lock:
            text = Text(STATUS_HEADER, style="bold")
            yield text
            self.console.print(text, highlight=False)

    def status(self, msg: str) -> None:
        logger.debug(msg)
        with self.line() as text:
            text.append(msg)

    def quick_result(self, current: int, total: int, result) -> None:
        rev_dep = result.rev_dep
        logger.debug(
            f"result {current} of {total}, {rev_dep.name} {rev_dep.vers}: "
            f"{result.quick_str()}"
        )
        with self.line() as text:
            text.append(
                f"result {current} of {total}, {rev_dep.name} {rev_dep.vers}: "
            )
            text.append(result.quick_str(), style=result.verdict.color)
