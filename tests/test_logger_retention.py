import os


def test_retention_prunes_old_logs(tmp_path):
    from crusader.logger.retention import enforce_retention

    for i in range(5):
        p = tmp_path / f"{i}.log"
        p.write_text("x")
        os.utime(p, (1000 + i, 1000 + i))

    enforce_retention(tmp_path, keep=2)

    remaining = sorted(p.name for p in tmp_path.glob("*.log"))
    assert remaining == ["3.log", "4.log"]


def test_retention_disabled(tmp_path):
    from crusader.logger.retention import enforce_retention

    for i in range(3):
        (tmp_path / f"{i}.log").write_text("x")

    enforce_retention(tmp_path, keep=0)

    assert len(list(tmp_path.glob("*.log"))) == 3


def test_retention_only_touches_matching_logs(tmp_path):
    from crusader.logger.retention import enforce_retention

    for i in range(3):
        p = tmp_path / f"run-{i}.log"
        p.write_text("x")
        os.utime(p, (1000 + i, 1000 + i))
    (tmp_path / "env-0.log").write_text("x")

    removed = enforce_retention(tmp_path, keep=1, pattern="run-*.log")

    assert sorted(p.name for p in removed) == ["run-0.log", "run-1.log"]
    assert (tmp_path / "env-0.log").exists()
