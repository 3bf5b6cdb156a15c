import io
import json
import logging
import sys
import tarfile
from pathlib import Path

import pytest
from rich.console import Console


@pytest.fixture(autouse=True)
def clean_env_and_modules(monkeypatch, tmp_path):
    """
    Ensure tests don't leak env, logger state, or cached configuration.
    """
    keys = [
        "CRUSADER_MANIFEST",
        "CRUSADER_JOBS",
        "CRUSADER_REGISTRY_URL",
        "CRUSADER_CACHE_DIR",
        "CRUSADER_LOGS_DIR",
        "CRUSADER_BUILD_COMMAND",
        "CRUSADER_REQUEST_TIMEOUT",
        "CRUSADER_COMMAND",
        "CRUSADER_RUN_ID",
        "CRUSADER_VERBOSE",
        "CRUSADER_QUIET",
        "LOG_LEVEL",
        "LOG_RETENTION",
    ]
    for k in keys:
        # setenv first so teardown restores the pre-test state even when the
        # code under test writes os.environ directly (bootstrap does)
        monkeypatch.setenv(k, "")
        monkeypatch.delenv(k)

    # Keep logs out of the repository
    monkeypatch.setenv("CRUSADER_LOGS_DIR", str(tmp_path / "logs"))

    from crusader.env import reset_env_caches
    from crusader.logger.state import STATE

    reset_env_caches()
    STATE.reset()

    root = logging.getLogger()
    for h in list(root.handlers):
        root.removeHandler(h)

    yield

    for h in list(root.handlers):
        root.removeHandler(h)
        if isinstance(h, logging.FileHandler):
            h.close()
    reset_env_caches()


# ----------------------------
# Crate archives
# ----------------------------


def build_crate_archive(name: str, version: str, files: dict[str, str]) -> bytes:
    """A .crate: gzipped tar with everything under <name>-<version>/."""
    buf = io.BytesIO()
    with tarfile.open(fileobj=buf, mode="w:gz") as tar:
        for rel, content in files.items():
            data = content.encode("utf-8")
            info = tarfile.TarInfo(f"{name}-{version}/{rel}")
            info.size = len(data)
            tar.addfile(info, io.BytesIO(data))
    return buf.getvalue()


@pytest.fixture
def crate_archive():
    return build_crate_archive


# ----------------------------
# Fake registry
# ----------------------------


class FakeRegistry:
    """In-memory stand-in for RegistryClient."""

    def __init__(self):
        self.rev_deps: dict[str, list[str]] = {}
        self.versions: dict[str, list[str]] = {}
        self.archives: dict[tuple[str, str], bytes] = {}
        self.downloads: list[tuple[str, str]] = []

    def add_crate(self, name, versions, archive_files=None):
        self.versions[name] = list(versions)
        for v in versions:
            files = archive_files or {"Cargo.toml": f'[package]\nname = "{name}"\n'}
            self.archives[(name, v)] = build_crate_archive(name, v, files)

    def reverse_dependencies(self, krate):
        deps = [{"crate_id": n} for n in self.rev_deps.get(krate, [])]
        return json.dumps({"dependencies": deps, "versions": [], "meta": {}})

    def crate_info(self, krate):
        from crusader.errors import HttpStatusError

        if krate not in self.versions:
            raise HttpStatusError(f"/crates/{krate}", 404)
        return json.dumps(
            {"crate": {"id": krate}, "versions": [{"num": v} for v in self.versions[krate]]}
        )

    def download(self, krate, version):
        self.downloads.append((krate, version))
        return self.archives[(krate, version)]


@pytest.fixture
def registry():
    return FakeRegistry()


# ----------------------------
# Fake build tool
# ----------------------------

# Reads ./mode ("<name>:<pass|broken|regressed>") from the extracted crate,
# appends "<name> base|wip" to the log file given as argv[1], and fails the
# way the mode says.
_BUILD_SCRIPT = """
import os, sys
name, mode = open("mode").read().strip().split(":")
wip = os.path.exists(os.path.join(".cargo", "config"))
with open(sys.argv[1], "a") as log:
    log.write(f"{name} {'wip' if wip else 'base'}\\n")
print("Compiling", name)
if mode == "broken" or (mode == "regressed" and wip):
    sys.stderr.write("error[E0425]: cannot find function\\n")
    sys.exit(101)
"""


@pytest.fixture
def build_log(tmp_path) -> Path:
    return tmp_path / "builds.log"


@pytest.fixture
def fake_build_command(tmp_path, build_log):
    script = tmp_path / "fake_cargo.py"
    script.write_text(_BUILD_SCRIPT)
    return (sys.executable, str(script), str(build_log))


def mode_files(name: str, mode: str) -> dict[str, str]:
    return {
        "Cargo.toml": f'[package]\nname = "{name}"\n',
        "mode": f"{name}:{mode}\n",
    }


@pytest.fixture
def crate_files():
    return mode_files


# ----------------------------
# Console capture
# ----------------------------


@pytest.fixture
def console_buffer():
    buf = io.StringIO()
    console = Console(file=buf, soft_wrap=True, highlight=False, width=200)
    return console, buf
