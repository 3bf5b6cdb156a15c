"""
Crate registry access: HTTP client, reverse dependency discovery and
version resolution.
"""

from crusader.registry.client import RegistryClient, crate_url
from crusader.registry.discovery import get_rev_deps, parse_rev_deps
from crusader.registry.versions import (
    UNRESOLVED_VERSION,
    RevDep,
    max_version,
    parse_crate,
    resolve_rev_dep_version,
)

__all__ = [
    "RegistryClient",
    "crate_url",
    "get_rev_deps",
    "parse_rev_deps",
    "UNRESOLVED_VERSION",
    "RevDep",
    "max_version",
    "parse_crate",
    "resolve_rev_dep_version",
]
