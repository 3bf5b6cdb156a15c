from __future__ import annotations

import os
import shlex
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from crusader.env.paths import cache_dir

# ------------------------------------------------------------
# Defaults
# ------------------------------------------------------------

DEFAULT_MANIFEST = "./Cargo.toml"
DEFAULT_REGISTRY_URL = "https://crates.io/api/v1"
DEFAULT_BUILD_COMMAND = "cargo build"

# ------------------------------------------------------------
# Minimal dotenv loader (read-only helper, bootstrap owns usage)
# ------------------------------------------------------------


def _load_dotenv(path: Path) -> None:
    """
    Minimal dotenv loader.
    - Silent
    - Never overrides existing os.environ
    """
    if not path.exists():
        return

    for raw in path.read_text(encoding="utf-8").splitlines():
        line = raw.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue

        k, v = line.split("=", 1)
        k = k.strip()
        v = v.strip()

        if k.startswith("export "):
            k = k[len("export ") :].strip()

        # strip inline comments
        if " #" in v:
            v = v.split(" #", 1)[0].rstrip()

        # strip quotes
        if len(v) >= 2 and v[0] == v[-1] and v[0] in ("'", '"'):
            v = v[1:-1]

        if k and k not in os.environ:
            os.environ[k] = v


# ------------------------------------------------------------
# Errors / helpers
# ------------------------------------------------------------


class ConfigError(RuntimeError):
    pass


def _as_bool(v: str) -> bool:
    return v.strip().lower() in {"1", "true", "yes", "on"}


def _as_int(v: str, default: int) -> int:
    try:
        return int(v)
    except Exception:
        return default


def _int_setting(name: str, default: int, *, minimum: int = 0) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from None
    if value < minimum:
        raise ConfigError(f"{name} must be >= {minimum}, got {value}")
    return value


def _default_jobs() -> int:
    return max(1, os.cpu_count() or 1)


# ------------------------------------------------------------
# Logging environment (SAFE ANYWHERE)
# ------------------------------------------------------------


@dataclass(frozen=True)
class LoggingEnvironment:
    log_level: str
    log_retention: int
    verbose: bool
    quiet: bool


def get_logging_env() -> LoggingEnvironment:
    return LoggingEnvironment(
        log_level=os.environ.get("LOG_LEVEL", "INFO"),
        log_retention=_as_int(os.environ.get("LOG_RETENTION", "30"), 30),
        verbose=_as_bool(os.environ.get("CRUSADER_VERBOSE", "0")),
        quiet=_as_bool(os.environ.get("CRUSADER_QUIET", "0")),
    )


# ------------------------------------------------------------
# Run environment (raw settings, no I/O)
# ------------------------------------------------------------


@dataclass(frozen=True)
class Environment:
    """
    Snapshot of every CRUSADER_* setting.

    Taken once; the run configuration is derived from it and nothing below
    the CLI reads os.environ again.
    """

    logging: LoggingEnvironment
    command: str
    manifest_path: Path
    registry_url: str
    cache_dir: Path
    jobs: int
    build_command: tuple[str, ...]
    request_timeout: Optional[float]

    @classmethod
    def from_environ(cls) -> "Environment":
        build_command = tuple(
            shlex.split(
                os.environ.get("CRUSADER_BUILD_COMMAND", "") or DEFAULT_BUILD_COMMAND
            )
        )
        if not build_command:
            raise ConfigError("CRUSADER_BUILD_COMMAND must not be empty")

        timeout = _int_setting("CRUSADER_REQUEST_TIMEOUT", 0)

        return cls(
            logging=get_logging_env(),
            command=os.environ.get("CRUSADER_COMMAND", "run"),
            manifest_path=Path(
                os.environ.get("CRUSADER_MANIFEST", "") or DEFAULT_MANIFEST
            ),
            registry_url=(
                os.environ.get("CRUSADER_REGISTRY_URL", "") or DEFAULT_REGISTRY_URL
            ).rstrip("/"),
            cache_dir=cache_dir(),
            jobs=_int_setting("CRUSADER_JOBS", _default_jobs(), minimum=1),
            build_command=build_command,
            request_timeout=float(timeout) if timeout else None,
        )

    def as_dict(self) -> dict:
        return {
            "Logging": {
                "log_level": self.logging.log_level,
                "log_retention": self.logging.log_retention,
                "verbose": self.logging.verbose,
                "quiet": self.logging.quiet,
            },
            "Run": {
                "command": self.command,
                "manifest_path": str(self.manifest_path),
                "jobs": self.jobs,
                "build_command": " ".join(self.build_command),
            },
            "Registry": {
                "registry_url": self.registry_url,
                "cache_dir": str(self.cache_dir),
                "request_timeout": self.request_timeout or "none",
            },
        }


_ENV: Optional[Environment] = None


def reset_env_caches() -> None:
    """Invalidate cached views of environment variables."""
    global _ENV
    _ENV = None


def get_env() -> Environment:
    global _ENV
    if _ENV is None:
        _ENV = Environment.from_environ()
    return _ENV
