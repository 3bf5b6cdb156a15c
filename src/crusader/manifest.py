"""
manifest.py

Reads the identity of the library under test from its Cargo manifest.
"""

from __future__ import annotations

import tomllib
from pathlib import Path

from crusader.errors import IoError, ManifestNameError, TomlError
from crusader.logger import get_logger

logger = get_logger(__name__)


def load_string(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except OSError as e:
        raise IoError(f"{path}: {e}") from e


def get_crate_name(manifest_path: Path) -> str:
    """
    Return `[package].name` from the manifest at `manifest_path`.

    Raises:
        IoError: the file cannot be read
        TomlError: the file is not valid TOML
        ManifestNameError: no [package] table or no string name in it
    """
    text = load_string(manifest_path)
    try:
        data = tomllib.loads(text)
    except tomllib.TOMLDecodeError as e:
        raise TomlError(f"{manifest_path}: {e}") from e

    package = data.get("package")
    if not isinstance(package, dict):
        raise ManifestNameError(manifest_path)

    name = package.get("name")
    if not isinstance(name, str):
        raise ManifestNameError(manifest_path)

    logger.debug(f"Crate name from {manifest_path}: {name}")
    return name
