from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional


@dataclass
class LoggingState:
    """What init_logging() last set up for this process."""

    initialized: bool = False
    run_id: Optional[str] = None
    log_dir: Optional[Path] = None
    log_file_path: Optional[Path] = None

    def reset(self) -> None:
        self.initialized = False
        self.run_id = None
        self.log_dir = None
        self.log_file_path = None


STATE = LoggingState()
