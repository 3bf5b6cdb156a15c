"""
build.py

Builds one downstream crate against one override of our library.

Each build gets its own scratch directory:

    <tmp>/crusader<random>/source/        extracted crate
    <tmp>/crusader<random>/source/.cargo/config   (WIP builds only)

The build command runs with cwd=source because cargo finds .cargo/config by
walking up from the working directory; --manifest-path would not pick it up.
"""

from __future__ import annotations

import json
import os
import subprocess
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence

from crusader.cache import CrateCache
from crusader.errors import IoError, Utf8Error, wrap_error
from crusader.logger import get_logger
from crusader.registry import RevDep

logger = get_logger(__name__)

MANIFEST_FILENAME = "Cargo.toml"
SCRATCH_PREFIX = "crusader"


@dataclass(frozen=True)
class CrateOverride:
    """
    Where the build should take our library from.

    path is None: whatever the downstream manifest requests (baseline).
    path set:     the local work-in-progress tree at `path`.
    """

    path: Optional[Path] = None

    @classmethod
    def default(cls) -> "CrateOverride":
        return cls()

    @classmethod
    def source(cls, path: Path) -> "CrateOverride":
        return cls(Path(path))

    @property
    def is_default(self) -> bool:
        return self.path is None

    def describe(self) -> str:
        return "published" if self.path is None else f"wip ({self.path})"


@dataclass(frozen=True)
class CompileResult:
    stdout: str
    stderr: str
    success: bool

    def failed(self) -> bool:
        return not self.success


def _override_dir(override_path: Path) -> Path:
    """
    Absolute directory of the WIP crate. Accepts the crate directory or its
    Cargo.toml.
    """
    p = Path(override_path)
    if p.name == MANIFEST_FILENAME:
        p = p.parent
    if not p.is_absolute():
        p = Path(os.path.abspath(Path.cwd() / p))
    return p


def emit_cargo_override_path(source_dir: Path, override_path: Path) -> Path:
    """
    Write <source_dir>/.cargo/config so cargo resolves our crate from the
    WIP tree. The path must be absolute: the build runs from source_dir.
    """
    target = _override_dir(override_path)
    logger.debug(f"overriding cargo path in {source_dir} with {target}")

    cargo_dir = source_dir / ".cargo"
    config_path = cargo_dir / "config"
    try:
        cargo_dir.mkdir(parents=True, exist_ok=True)
        # json.dumps yields a valid TOML basic string (quotes, backslashes)
        config_path.write_text(
            f"paths = [{json.dumps(str(target))}]\n", encoding="utf-8"
        )
    except OSError as e:
        raise IoError(f"{config_path}: {e}") from e
    return config_path


def _decode(stream: bytes, what: str) -> str:
    try:
        return stream.decode("utf-8")
    except UnicodeDecodeError as e:
        raise Utf8Error(f"build {what}: {e}") from e


def run_build(source_dir: Path, build_command: Sequence[str]) -> CompileResult:
    logger.debug(f"running {' '.join(build_command)} in {source_dir}")
    try:
        r = subprocess.run(
            list(build_command),
            cwd=str(source_dir),
            capture_output=True,
        )
    except OSError as e:
        raise wrap_error(e) from e

    success = r.returncode == 0
    logger.debug(f"result: {success}")
    return CompileResult(
        stdout=_decode(r.stdout, "stdout"),
        stderr=_decode(r.stderr, "stderr"),
        success=success,
    )


def compile_with_custom_dep(
    rev_dep: RevDep,
    krate: CrateOverride,
    *,
    cache: CrateCache,
    build_command: Sequence[str],
) -> CompileResult:
    """
    Fetch, extract and build `rev_dep` with our crate taken from `krate`.

    The scratch directory is removed on every exit path, including errors
    raised by the fetch, extraction or the build itself.
    """
    crate_handle = cache.get_crate_handle(rev_dep)

    try:
        temp_dir = tempfile.TemporaryDirectory(prefix=SCRATCH_PREFIX)
    except OSError as e:
        raise IoError(f"scratch dir: {e}") from e

    with temp_dir as scratch:
        source_dir = Path(scratch) / "source"
        try:
            source_dir.mkdir()
        except OSError as e:
            raise IoError(f"{source_dir}: {e}") from e

        crate_handle.unpack_source_to(source_dir)

        if krate.path is not None:
            emit_cargo_override_path(source_dir, krate.path)

        logger.debug(f"building {rev_dep} against {krate.describe()}")
        return run_build(source_dir, build_command)
