"""
versions.py

Picks the version of a downstream crate to test: the highest version the
registry lists that parses as SemVer.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Iterable, List, Optional

import semver

from crusader.errors import JsonDecodeError, NoCrateVersionsError
from crusader.logger import get_logger
from crusader.registry.client import RegistryClient

logger = get_logger(__name__)

# Stand-in version for results whose real version was never resolved.
UNRESOLVED_VERSION = semver.Version(0, 0, 0)


@dataclass(frozen=True)
class RevDep:
    name: str
    vers: semver.Version

    def __str__(self) -> str:
        return f"{self.name} {self.vers}"


def parse_crate(body: str) -> List[str]:
    """
    Pull the version strings out of a crate metadata response.

    The registry returns much more; only versions[].num is needed.
    """
    try:
        data = json.loads(body)
    except json.JSONDecodeError as e:
        raise JsonDecodeError(f"crate metadata: {e}") from e

    versions = data.get("versions") if isinstance(data, dict) else None
    if not isinstance(versions, list):
        raise JsonDecodeError("crate metadata: missing 'versions' list")

    nums: List[str] = []
    for v in versions:
        num = v.get("num") if isinstance(v, dict) else None
        if not isinstance(num, str):
            raise JsonDecodeError(f"crate metadata: bad version entry {v!r}")
        nums.append(num)
    return nums


def parse_version(num: str) -> Optional[semver.Version]:
    try:
        return semver.Version.parse(num)
    except (TypeError, ValueError):
        return None


def max_version(nums: Iterable[str]) -> Optional[semver.Version]:
    """Highest SemVer among `nums`; unparsable strings are ignored."""
    parsed = [v for v in (parse_version(n) for n in nums) if v is not None]
    if not parsed:
        return None
    return max(parsed)


def resolve_rev_dep_version(client: RegistryClient, name: str) -> RevDep:
    """
    Raises:
        NoCrateVersionsError: none of the listed versions parse
    """
    logger.debug(f"resolving current version for {name}")
    nums = parse_crate(client.crate_info(name))
    vers = max_version(nums)
    if vers is None:
        raise NoCrateVersionsError(name)
    return RevDep(name=name, vers=vers)
