"""bootstrap.py

Process bootstrap for crusader.

Rules:
1) Only bootstrap is allowed to *mutate* os.environ for shared run context.
2) Call bootstrap_base_env() exactly once at the true entrypoint.
3) Call bootstrap_run_context() after argparse parsing, before init_logging().

Everything below the CLI receives a Config value instead of reading the
environment.
"""

from __future__ import annotations

import os
from datetime import datetime
from pathlib import Path

from crusader.env import _load_dotenv, reset_env_caches

_BOOTSTRAPPED = False


def bootstrap_base_env(dotenv_path: Path | None = None) -> None:
    """Load ./.env (if any) and stamp a run id."""
    global _BOOTSTRAPPED
    if _BOOTSTRAPPED:
        return

    _load_dotenv(dotenv_path or Path.cwd() / ".env")

    os.environ.setdefault(
        "CRUSADER_RUN_ID",
        datetime.now().strftime("%Y-%m-%d_%H-%M-%S"),
    )

    reset_env_caches()
    _BOOTSTRAPPED = True


def bootstrap_run_context(
    *,
    command: str,
    manifest: str | None = None,
    jobs: int | None = None,
    verbose: bool | None = None,
    quiet: bool | None = None,
) -> None:
    """Establish run-scoped context used by logging + configuration."""

    os.environ["CRUSADER_COMMAND"] = command

    if manifest:
        os.environ["CRUSADER_MANIFEST"] = manifest
    if jobs is not None:
        os.environ["CRUSADER_JOBS"] = str(jobs)

    if verbose is not None:
        os.environ["CRUSADER_VERBOSE"] = "1" if verbose else "0"
    if quiet is not None:
        os.environ["CRUSADER_QUIET"] = "1" if quiet else "0"

    # Context changes must invalidate cached env views.
    reset_env_caches()
