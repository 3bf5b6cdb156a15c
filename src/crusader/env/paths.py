from __future__ import annotations

import os
from pathlib import Path

# ---------------------------------------------------------------------
# Working root
# ---------------------------------------------------------------------

# Everything crusader writes lives under ./.crusader of the directory it is
# run from, next to the library being tested.
STATE_DIRNAME = ".crusader"


def state_root() -> Path:
    return Path.cwd() / STATE_DIRNAME


# ---------------------------------------------------------------------
# Base directories (override-friendly)
# ---------------------------------------------------------------------


def _resolve_dir(env_var: str, default: Path, *, create: bool = True) -> Path:
    """
    Resolve a directory path from an environment variable or default.
    Ensures the directory exists unless create=False.
    """
    raw = os.environ.get(env_var)
    path = Path(raw).expanduser().resolve() if raw else default
    if create:
        path.mkdir(parents=True, exist_ok=True)
    return path


def logs_dir() -> Path:
    return _resolve_dir("CRUSADER_LOGS_DIR", state_root() / "logs")


def cache_dir() -> Path:
    """
    Crate archive cache root. Created lazily by the fetcher, not here.
    """
    return _resolve_dir(
        "CRUSADER_CACHE_DIR", state_root() / "crate-cache", create=False
    )


# ---------------------------------------------------------------------
# Log layout helpers (used by logger)
# ---------------------------------------------------------------------


def module_logs_dir(module: str) -> Path:
    """
    Base log directory for a CLI command (e.g. run, env).
    """
    path = logs_dir() / module
    path.mkdir(parents=True, exist_ok=True)
    return path
