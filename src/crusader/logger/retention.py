from __future__ import annotations

from pathlib import Path


def enforce_retention(log_dir: Path, keep: int, pattern: str = "*.log") -> list[Path]:
    """
    Delete all but the `keep` newest files matching `pattern`.
    Returns the deleted paths. keep <= 0 disables pruning.
    """
    if keep <= 0:
        return []

    logs = sorted(
        log_dir.glob(pattern),
        key=lambda p: p.stat().st_mtime,
        reverse=True,
    )

    removed: list[Path] = []
    for old in logs[keep:]:
        try:
            old.unlink()
        except FileNotFoundError:
            continue
        removed.append(old)
    return removed
