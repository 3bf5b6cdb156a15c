"""
discovery.py

Reverse dependency discovery: which crates on the registry depend on ours.

Only the first page the registry returns is read.
"""

from __future__ import annotations

import json
from typing import Callable, List

from crusader.errors import JsonDecodeError
from crusader.logger import get_logger
from crusader.registry.client import RegistryClient

logger = get_logger(__name__)

RevDepName = str


def parse_rev_deps(body: str) -> List[RevDepName]:
    """
    Parse a reverse_dependencies response into crate names.

    Order and duplicates are kept as the registry returned them.

    Raises:
        JsonDecodeError: body is not JSON or lacks dependencies[].crate_id
    """
    try:
        data = json.loads(body)
    except json.JSONDecodeError as e:
        raise JsonDecodeError(f"reverse dependencies: {e}") from e

    deps = data.get("dependencies") if isinstance(data, dict) else None
    if not isinstance(deps, list):
        raise JsonDecodeError("reverse dependencies: missing 'dependencies' list")

    rev_deps: List[RevDepName] = []
    for dep in deps:
        crate_id = dep.get("crate_id") if isinstance(dep, dict) else None
        if not isinstance(crate_id, str):
            raise JsonDecodeError(f"reverse dependencies: bad entry {dep!r}")
        rev_deps.append(crate_id)

    logger.debug(f"revdeps: {rev_deps}")
    return rev_deps


def get_rev_deps(
    client: RegistryClient,
    crate_name: str,
    status: Callable[[str], None] = logger.info,
) -> List[RevDepName]:
    status(f"downloading reverse deps for {crate_name}")
    body = client.reverse_dependencies(crate_name)
    rev_deps = parse_rev_deps(body)
    status(f"{len(rev_deps)} reverse deps")
    return rev_deps
