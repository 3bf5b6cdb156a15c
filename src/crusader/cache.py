"""
cache.py

On-disk cache of downloaded crate archives.

Layout: <root>/<name>/<name>-<version>.crate, one file per resolved crate,
created on first fetch and never invalidated.

Two workers fetching the same (name, version) at the same moment may both
download it; the last rename wins and both files are identical.
"""

from __future__ import annotations

import os
import subprocess
import tempfile
from dataclasses import dataclass
from pathlib import Path

from crusader.errors import ProcessError, wrap_error
from crusader.logger import get_logger
from crusader.registry import RegistryClient, RevDep

logger = get_logger(__name__)

ARCHIVE_EXT = "crate"


@dataclass(frozen=True)
class CrateHandle:
    """A cached .crate archive (a gzipped tarball)."""

    path: Path

    def unpack_source_to(self, dest: Path) -> None:
        """
        Extract into `dest`, dropping the <name>-<version>/ directory every
        registry archive wraps its contents in.

        Raises:
            ProcessError: tar exited non-zero (detail is its stderr)
            IoError: tar could not be launched
        """
        logger.debug(f"unpacking {self.path} to {dest}")
        cmd = [
            "tar",
            "xzf",
            str(self.path),
            "--strip-components=1",
            "-C",
            str(dest),
        ]
        try:
            r = subprocess.run(cmd, capture_output=True)
        except OSError as e:
            raise wrap_error(e) from e

        if r.returncode != 0:
            raise ProcessError(r.stderr.decode("utf-8", errors="replace"))


class CrateCache:
    def __init__(self, root: Path, client: RegistryClient) -> None:
        self.root = root
        self.client = client

    def crate_file(self, rev_dep: RevDep) -> Path:
        return (
            self.root
            / rev_dep.name
            / f"{rev_dep.name}-{rev_dep.vers}.{ARCHIVE_EXT}"
        )

    def get_crate_handle(self, rev_dep: RevDep) -> CrateHandle:
        """
        Return the cached archive for `rev_dep`, downloading it first when
        it is not on disk yet.
        """
        crate_file = self.crate_file(rev_dep)
        if crate_file.is_file():
            logger.debug(f"cache hit: {crate_file}")
            return CrateHandle(crate_file)

        logger.debug(f"cache miss: {crate_file}")
        body = self.client.download(rev_dep.name, str(rev_dep.vers))
        self._store(crate_file, body)
        return CrateHandle(crate_file)

    def _store(self, crate_file: Path, body: bytes) -> None:
        try:
            crate_file.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp = tempfile.mkstemp(
                dir=crate_file.parent, prefix=f".{crate_file.name}.", suffix=".part"
            )
            try:
                with os.fdopen(fd, "wb") as f:
                    f.write(body)
                    f.flush()
                os.replace(tmp, crate_file)
            except BaseException:
                Path(tmp).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise wrap_error(e) from e
