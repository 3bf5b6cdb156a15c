"""
client.py

HTTP access to the crate registry.

Responsibilities:
- URL construction for the three registry endpoints used
- One-hop 302 redirect following (downloads are served from a CDN)
- HTTP / transport → crusader error translation

Does NOT:
- Retry or back off (a failed call is reported, not repeated)
- Authenticate
"""

from __future__ import annotations

from typing import Optional
from urllib.parse import urljoin

import requests

from crusader.errors import HttpStatusError, Utf8Error, wrap_error
from crusader.logger import get_logger

logger = get_logger(__name__)

USER_AGENT = "crusader (reverse dependency regression tester)"


def crate_url(base_url: str, krate: str, call: Optional[str] = None) -> str:
    url = f"{base_url.rstrip('/')}/crates/{krate}"
    if call:
        return f"{url}/{call}"
    return url


def _get(
    session: requests.Session, url: str, timeout: Optional[float]
) -> requests.Response:
    try:
        return session.get(url, timeout=timeout, allow_redirects=False)
    except requests.RequestException as e:
        raise wrap_error(e) from e


def _status_error(url: str, response: requests.Response) -> HttpStatusError:
    return HttpStatusError(
        url,
        response.status_code,
        headers=response.headers,
        body=response.content,
    )


def http_get_bytes(
    url: str,
    *,
    timeout: Optional[float] = None,
    session: Optional[requests.Session] = None,
) -> bytes:
    """
    GET `url` and return the raw body.

    A 302 with a Location header is followed exactly once; a relative
    Location resolves against `url`. The target must answer 200. Every
    other status is an HttpStatusError.
    """
    s = session or requests.Session()
    response = _get(s, url, timeout)

    if response.status_code == 302:
        location = response.headers.get("location")
        if location:
            location = urljoin(url, location)
            logger.debug(f"following 302 HTTP response to {location}")
            moved = _get(s, location, timeout)
            if moved.status_code != 200:
                raise _status_error(location, moved)
            return moved.content
        raise _status_error(url, response)

    if response.status_code != 200:
        raise _status_error(url, response)

    return response.content


def http_get_to_string(
    url: str,
    *,
    timeout: Optional[float] = None,
    session: Optional[requests.Session] = None,
) -> str:
    body = http_get_bytes(url, timeout=timeout, session=session)
    try:
        return body.decode("utf-8")
    except UnicodeDecodeError as e:
        raise Utf8Error(f"{url}: {e}") from e


class RegistryClient:
    """
    The registry endpoints crusader consumes.

    One instance is shared by every worker thread. requests.Session is not
    documented as thread-safe, so each call uses a fresh session.
    """

    def __init__(self, base_url: str, timeout: Optional[float] = None) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def _session(self) -> requests.Session:
        s = requests.Session()
        s.headers["User-Agent"] = USER_AGENT
        return s

    def get_text(self, url: str) -> str:
        with self._session() as s:
            return http_get_to_string(url, timeout=self.timeout, session=s)

    def get_bytes(self, url: str) -> bytes:
        with self._session() as s:
            return http_get_bytes(url, timeout=self.timeout, session=s)

    def reverse_dependencies(self, krate: str) -> str:
        return self.get_text(crate_url(self.base_url, krate, "reverse_dependencies"))

    def crate_info(self, krate: str) -> str:
        return self.get_text(crate_url(self.base_url, krate))

    def download(self, krate: str, version: str) -> bytes:
        return self.get_bytes(crate_url(self.base_url, krate, f"{version}/download"))


__all__ = [
    "RegistryClient",
    "crate_url",
    "http_get_bytes",
    "http_get_to_string",
]
