import pytest
import semver

from crusader.cache import CrateCache, CrateHandle
from crusader.errors import ProcessError
from crusader.registry import RevDep


def _rev_dep(name="foo", vers="0.3.0"):
    return RevDep(name, semver.Version.parse(vers))


def test_cache_layout(tmp_path, registry):
    cache = CrateCache(tmp_path / "crate-cache", registry)

    assert cache.crate_file(_rev_dep()) == (
        tmp_path / "crate-cache" / "foo" / "foo-0.3.0.crate"
    )


def test_fetch_is_idempotent(tmp_path, registry):
    registry.add_crate("foo", ["0.3.0"])
    cache = CrateCache(tmp_path / "crate-cache", registry)

    first = cache.get_crate_handle(_rev_dep())
    second = cache.get_crate_handle(_rev_dep())

    assert first == second
    assert first.path.read_bytes() == registry.archives[("foo", "0.3.0")]
    assert registry.downloads == [("foo", "0.3.0")]


def test_versions_are_cached_separately(tmp_path, registry):
    registry.add_crate("foo", ["0.2.0", "0.3.0"])
    cache = CrateCache(tmp_path, registry)

    cache.get_crate_handle(_rev_dep(vers="0.2.0"))
    cache.get_crate_handle(_rev_dep(vers="0.3.0"))

    assert sorted(p.name for p in (tmp_path / "foo").iterdir()) == [
        "foo-0.2.0.crate",
        "foo-0.3.0.crate",
    ]


def test_failed_download_leaves_no_entry(tmp_path, registry):
    from crusader.errors import HttpStatusError

    def fail(krate, version):
        raise HttpStatusError(f"/crates/{krate}/{version}/download", 403)

    registry.download = fail
    cache = CrateCache(tmp_path, registry)

    with pytest.raises(HttpStatusError):
        cache.get_crate_handle(_rev_dep())
    assert not cache.crate_file(_rev_dep()).exists()


def test_unpack_strips_top_level_directory(tmp_path, crate_archive):
    archive = tmp_path / "foo-0.3.0.crate"
    archive.write_bytes(
        crate_archive("foo", "0.3.0", {"Cargo.toml": "[package]\n", "src/lib.rs": ""})
    )
    dest = tmp_path / "out"
    dest.mkdir()

    CrateHandle(archive).unpack_source_to(dest)

    assert (dest / "Cargo.toml").is_file()
    assert (dest / "src" / "lib.rs").is_file()
    assert not (dest / "foo-0.3.0").exists()


def test_unpack_corrupt_archive_is_process_error(tmp_path):
    archive = tmp_path / "bad.crate"
    archive.write_bytes(b"this is not a tarball")
    dest = tmp_path / "out"
    dest.mkdir()

    with pytest.raises(ProcessError) as exc:
        CrateHandle(archive).unpack_source_to(dest)
    assert exc.value.stderr
