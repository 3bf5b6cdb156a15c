"""
runner.py

Runs every downstream crate's test on a bounded thread pool.

One unit of work per crate: resolve version → baseline build → WIP build
(only if the baseline built) → classify. Units never share state; the only
cross-thread data is the list of results, assembled here on the calling
thread.

Two orderings come out of a run:
- progress lines, in completion order, with a live counter
- the final result list, in discovery order
"""

from __future__ import annotations

import functools
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from typing import Callable, Optional, Sequence

from crusader.build import compile_with_custom_dep
from crusader.cache import CrateCache
from crusader.config import Config
from crusader.errors import ChannelError, CrusaderError
from crusader.logger import get_logger
from crusader.registry import (
    UNRESOLVED_VERSION,
    RegistryClient,
    RevDep,
    get_rev_deps,
    resolve_rev_dep_version,
)
from crusader.ui.status import StatusSink
from crusader.verdict import TestResult, Verdict

log = get_logger("crusader.runner")

UnitOfWork = Callable[[str], TestResult]


@dataclass(frozen=True)
class RunOutcome:
    results: list[TestResult]

    def count(self, verdict: Verdict) -> int:
        return sum(1 for r in self.results if r.verdict == verdict)

    @property
    def counts(self) -> dict[Verdict, int]:
        return {v: self.count(v) for v in Verdict}

    @property
    def regressions(self) -> list[TestResult]:
        return [r for r in self.results if r.verdict == Verdict.REGRESSED]

    def summary(self) -> str:
        c = self.counts
        return (
            f"{c[Verdict.PASS]} pass, {c[Verdict.REGRESSED]} regressed, "
            f"{c[Verdict.BROKEN]} broken, {c[Verdict.ERROR]} error"
        )


# ------------------------------------------------------------
# Unit of work
# ------------------------------------------------------------


def run_test_local(
    config: Config,
    rev_dep: str,
    *,
    client: RegistryClient,
    cache: CrateCache,
    status: Callable[[str], None] = log.info,
) -> TestResult:
    """
    Test one downstream crate. Every crusader error becomes an ERROR result;
    anything else escapes to the task handle.
    """
    status(f"testing crate {rev_dep}")

    try:
        resolved = resolve_rev_dep_version(client, rev_dep)
    except CrusaderError as e:
        return TestResult.from_error(RevDep(rev_dep, UNRESOLVED_VERSION), e)

    build = functools.partial(
        compile_with_custom_dep, cache=cache, build_command=config.build_command
    )

    try:
        base_result = build(resolved, config.base_override)
        if base_result.failed():
            return TestResult.broken(resolved, base_result)
        next_result = build(resolved, config.next_override)
    except CrusaderError as e:
        return TestResult.from_error(resolved, e)

    return TestResult.from_builds(resolved, base_result, next_result)


# ------------------------------------------------------------
# Task handles
# ------------------------------------------------------------


class TaskHandle:
    """
    Handle on one submitted unit of work.

    join() blocks until the unit finishes and always returns a TestResult:
    the unit's own, or an ERROR result when the worker raised.
    """

    def __init__(self, rev_dep: str, future: "Future[TestResult]") -> None:
        self.rev_dep = rev_dep
        self.future = future
        self._result: Optional[TestResult] = None

    def join(self) -> TestResult:
        if self._result is None:
            self._result = self._receive()
        return self._result

    def _receive(self) -> TestResult:
        try:
            return self.future.result()
        except Exception as e:
            log.error(f"worker for {self.rev_dep} died: {e!r}")
            return TestResult.from_error(
                RevDep(self.rev_dep, UNRESOLVED_VERSION),
                ChannelError(f"worker for {self.rev_dep} died: {e!r}"),
            )


def submit(pool: ThreadPoolExecutor, unit: UnitOfWork, rev_dep: str) -> TaskHandle:
    return TaskHandle(rev_dep, pool.submit(unit, rev_dep))


# ------------------------------------------------------------
# Orchestration
# ------------------------------------------------------------


def run_tests(
    rev_deps: Sequence[str],
    unit: UnitOfWork,
    *,
    jobs: int,
    sink: StatusSink,
) -> list[TestResult]:
    """
    Run `unit` for every name in `rev_deps` on `jobs` workers.

    Returns results in the order of `rev_deps`. Progress is reported as
    units finish.
    """
    total = len(rev_deps)
    with ThreadPoolExecutor(
        max_workers=max(1, jobs), thread_name_prefix="crusader"
    ) as pool:
        handles = [submit(pool, unit, name) for name in rev_deps]
        by_future = {h.future: h for h in handles}

        for current, fut in enumerate(as_completed(by_future), start=1):
            sink.quick_result(current, total, by_future[fut].join())

        return [h.join() for h in handles]


def run(
    config: Config,
    sink: StatusSink,
    *,
    client: Optional[RegistryClient] = None,
    cache: Optional[CrateCache] = None,
) -> RunOutcome:
    """
    Discover reverse dependencies of config.crate_name and test them all.

    A discovery failure raises; nothing has been tested at that point.
    """
    client = client or RegistryClient(config.registry_url, config.request_timeout)
    cache = cache or CrateCache(config.cache_dir, client)

    rev_deps = get_rev_deps(client, config.crate_name, status=sink.status)

    unit = functools.partial(
        run_test_local, config, client=client, cache=cache, status=sink.status
    )
    log.info(f"Testing {len(rev_deps)} crates on {config.jobs} workers")
    results = run_tests(rev_deps, unit, jobs=config.jobs, sink=sink)

    outcome = RunOutcome(results)
    log.info(f"Run summary: {outcome.summary()}")
    return outcome
