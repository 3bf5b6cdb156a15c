import semver

from crusader.build import CompileResult
from crusader.errors import IoError, NoCrateVersionsError
from crusader.registry import RevDep
from crusader.runner import RunOutcome
from crusader.ui.report import report_error, report_results
from crusader.verdict import TestResult

OK = CompileResult("", "", True)
FAIL = CompileResult("", "error[E0308]: mismatched types\n", False)


def _rd(name, vers="1.0.0"):
    return RevDep(name, semver.Version.parse(vers))


def test_report_lists_results_in_order(console_buffer):
    console, buf = console_buffer
    outcome = RunOutcome(
        [
            TestResult.from_builds(_rd("foo", "0.3.0"), OK, OK),
            TestResult.from_builds(_rd("baz"), OK, FAIL),
            TestResult.from_error(_rd("ghost", "0.0.0"), NoCrateVersionsError("ghost")),
        ]
    )

    report_results(outcome, console)
    out = buf.getvalue()

    assert out.index("foo") < out.index("baz") < out.index("ghost")
    assert "no parsable versions for ghost" in out
    assert "error[E0308]: mismatched types" in out
    assert "results: 1 pass, 1 regressed, 0 broken, 1 error" in out


def test_report_error_keeps_brackets(console_buffer):
    console, buf = console_buffer

    report_error(IoError("[Errno 2] No such file or directory: 'Cargo.toml'"), console)

    assert "crusader: error io: [Errno 2]" in buf.getvalue()
