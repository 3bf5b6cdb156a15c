"""
errors.py

The closed error family raised by every crusader operation.

Each failure kind has exactly one exception class. Foreign exceptions coming
out of requests, semver, tomllib, json or the OS are translated once, at the
boundary of the operation that produced them, through wrap_error().
"""

from __future__ import annotations

import json
import tomllib
from enum import Enum
from pathlib import Path
from typing import Mapping, Optional

import requests


class ErrorKind(str, Enum):
    MANIFEST_NAME = "manifest_name"
    SEMVER = "semver"
    TOML = "toml"
    IO = "io"
    NETWORK = "network"
    HTTP = "http"
    UTF8 = "utf8"
    JSON = "json"
    RECV = "recv"
    NO_CRATE_VERSIONS = "no_crate_versions"
    PROCESS = "process"


class CrusaderError(Exception):
    """Base error. Subclasses pin `kind`."""

    kind: ErrorKind

    def __init__(self, detail: str = "") -> None:
        super().__init__(detail)
        self.detail = detail

    def __str__(self) -> str:
        if self.detail:
            return f"{self.kind.value}: {self.detail}"
        return self.kind.value

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.detail!r})"


class ManifestNameError(CrusaderError):
    """Manifest has no [package].name string."""

    kind = ErrorKind.MANIFEST_NAME

    def __init__(self, manifest_path: Path) -> None:
        super().__init__(f"no [package].name in {manifest_path}")
        self.manifest_path = manifest_path


class VersionParseError(CrusaderError):
    kind = ErrorKind.SEMVER


class TomlError(CrusaderError):
    kind = ErrorKind.TOML


class IoError(CrusaderError):
    kind = ErrorKind.IO


class NetworkError(CrusaderError):
    """Transport-level failure: DNS, connect, TLS, read timeout."""

    kind = ErrorKind.NETWORK


class HttpStatusError(CrusaderError):
    """Registry answered with a status other than 200 (or an unfollowable 302)."""

    kind = ErrorKind.HTTP

    def __init__(
        self,
        url: str,
        status_code: int,
        headers: Optional[Mapping[str, str]] = None,
        body: bytes = b"",
    ) -> None:
        excerpt = body[:200].decode("utf-8", errors="replace")
        detail = f"HTTP {status_code} for {url}"
        if excerpt:
            detail = f"{detail}: {excerpt}"
        super().__init__(detail)
        self.url = url
        self.status_code = status_code
        self.headers = dict(headers or {})
        self.body = body


class Utf8Error(CrusaderError):
    kind = ErrorKind.UTF8


class JsonDecodeError(CrusaderError):
    kind = ErrorKind.JSON


class ChannelError(CrusaderError):
    """A worker died before handing its result back to the aggregator."""

    kind = ErrorKind.RECV


class NoCrateVersionsError(CrusaderError):
    kind = ErrorKind.NO_CRATE_VERSIONS

    def __init__(self, name: str = "") -> None:
        super().__init__(f"no parsable versions for {name}" if name else "")
        self.name = name


class ProcessError(CrusaderError):
    """External tool exited non-zero. `detail` is its stderr."""

    kind = ErrorKind.PROCESS

    def __init__(self, stderr: str) -> None:
        super().__init__(stderr.strip())
        self.stderr = stderr


def wrap_error(exc: BaseException) -> CrusaderError:
    """
    Translate any exception raised by a crusader operation into the closed
    error family. CrusaderError instances are returned unchanged.

    Order matters: UnicodeDecodeError and JSONDecodeError are ValueError
    subclasses, and requests' JSON error is both a ValueError and a
    RequestException.
    """
    if isinstance(exc, CrusaderError):
        return exc
    if isinstance(exc, UnicodeError):
        return Utf8Error(str(exc))
    if isinstance(exc, json.JSONDecodeError):
        return JsonDecodeError(str(exc))
    if isinstance(exc, tomllib.TOMLDecodeError):
        return TomlError(str(exc))
    if isinstance(exc, requests.RequestException):
        return NetworkError(str(exc))
    if isinstance(exc, OSError):
        return IoError(str(exc))
    if isinstance(exc, (ValueError, TypeError)):
        return VersionParseError(str(exc))
    return ChannelError(f"{type(exc).__name__}: {exc}")


__all__ = [
    "ErrorKind",
    "CrusaderError",
    "ManifestNameError",
    "VersionParseError",
    "TomlError",
    "IoError",
    "NetworkError",
    "HttpStatusError",
    "Utf8Error",
    "JsonDecodeError",
    "ChannelError",
    "NoCrateVersionsError",
    "ProcessError",
    "wrap_error",
]
