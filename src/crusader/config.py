"""
config.py

The run configuration, built once at startup and passed explicitly into the
orchestrator. Nothing in the core reads the process environment.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from crusader.build import CrateOverride
from crusader.env import Environment, get_env
from crusader.logger import get_logger
from crusader.manifest import get_crate_name

logger = get_logger(__name__)


@dataclass(frozen=True)
class Config:
    manifest_path: Path
    crate_name: str
    base_override: CrateOverride
    next_override: CrateOverride
    registry_url: str
    cache_dir: Path
    jobs: int
    build_command: tuple[str, ...]
    request_timeout: Optional[float] = None


def load_config(
    env: Optional[Environment] = None,
    *,
    manifest_path: Optional[Path] = None,
    jobs: Optional[int] = None,
) -> Config:
    """
    Resolve the run configuration.

    Explicit arguments win over the environment snapshot. Reading the
    manifest happens here, so a missing or nameless manifest aborts the run
    before any registry traffic.
    """
    env = env or get_env()
    manifest = Path(manifest_path) if manifest_path else env.manifest_path
    logger.debug(f"Using manifest {manifest}")

    crate_name = get_crate_name(manifest)

    return Config(
        manifest_path=manifest,
        crate_name=crate_name,
        base_override=CrateOverride.default(),
        next_override=CrateOverride.source(manifest.parent),
        registry_url=env.registry_url,
        cache_dir=env.cache_dir,
        jobs=jobs or env.jobs,
        build_command=env.build_command,
        request_timeout=env.request_timeout,
    )
