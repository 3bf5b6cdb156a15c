"""
verdict.py

Classification of one downstream crate's pair of builds.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from crusader.build import CompileResult
from crusader.errors import CrusaderError
from crusader.registry import RevDep


class Verdict(str, Enum):
    BROKEN = "broken"
    REGRESSED = "regressed"
    PASS = "pass"
    ERROR = "error"

    @property
    def color(self) -> str:
        return _COLORS[self]


_COLORS = {
    Verdict.BROKEN: "bright_yellow",
    Verdict.REGRESSED: "bright_red",
    Verdict.PASS: "bright_green",
    Verdict.ERROR: "bright_magenta",
}


def classify(base: CompileResult, next_: Optional[CompileResult] = None) -> Verdict:
    """
    Verdict for a baseline build and a WIP build.

    A failed baseline is BROKEN whatever `next_` is; callers skip the WIP
    build in that case and pass nothing. A passing baseline needs `next_`.
    """
    if base.failed():
        return Verdict.BROKEN
    if next_ is None:
        raise ValueError("baseline passed but no WIP build result was given")
    if next_.failed():
        return Verdict.REGRESSED
    return Verdict.PASS


@dataclass(frozen=True)
class TestResult:
    rev_dep: RevDep
    verdict: Verdict
    base: Optional[CompileResult] = None
    next: Optional[CompileResult] = None
    error: Optional[CrusaderError] = None

    # Not a pytest test class despite the name.
    __test__ = False

    @classmethod
    def broken(cls, rev_dep: RevDep, base: CompileResult) -> "TestResult":
        return cls(rev_dep, Verdict.BROKEN, base=base)

    @classmethod
    def regressed(
        cls, rev_dep: RevDep, base: CompileResult, next_: CompileResult
    ) -> "TestResult":
        return cls(rev_dep, Verdict.REGRESSED, base=base, next=next_)

    @classmethod
    def pass_(
        cls, rev_dep: RevDep, base: CompileResult, next_: CompileResult
    ) -> "TestResult":
        return cls(rev_dep, Verdict.PASS, base=base, next=next_)

    @classmethod
    def from_error(cls, rev_dep: RevDep, error: CrusaderError) -> "TestResult":
        return cls(rev_dep, Verdict.ERROR, error=error)

    @classmethod
    def from_builds(
        cls, rev_dep: RevDep, base: CompileResult, next_: Optional[CompileResult]
    ) -> "TestResult":
        verdict = classify(base, next_)
        if verdict == Verdict.BROKEN:
            return cls.broken(rev_dep, base)
        if verdict == Verdict.REGRESSED:
            return cls.regressed(rev_dep, base, next_)
        return cls.pass_(rev_dep, base, next_)

    def quick_str(self) -> str:
        return self.verdict.value

    def __str__(self) -> str:
        return f"{self.rev_dep}: {self.quick_str()}"
