import threading

import semver

from crusader.build import CompileResult
from crusader.registry import RevDep
from crusader.ui.status import StatusSink
from crusader.verdict import TestResult


def test_status_line(console_buffer):
    console, buf = console_buffer
    StatusSink(console).status("3 reverse deps")

    assert buf.getvalue() == "crusader: 3 reverse deps\n"


def test_quick_result_line(console_buffer):
    console, buf = console_buffer
    ok = CompileResult("", "", True)
    result = TestResult.from_builds(
        RevDep("foo", semver.Version.parse("0.3.0")), ok, ok
    )

    StatusSink(console).quick_result(2, 5, result)

    assert buf.getvalue() == "crusader: result 2 of 5, foo 0.3.0: pass\n"


def test_lines_do_not_interleave(console_buffer):
    console, buf = console_buffer
    sink = StatusSink(console)
    start = threading.Barrier(8)

    def worker(n):
        start.wait()
        for i in range(50):
            sink.status(f"worker {n} line {i}")

    threads = [threading.Thread(target=worker, args=(n,)) for n in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    lines = buf.getvalue().splitlines()
    assert len(lines) == 400
    assert all(
        line.startswith("crusader: worker ") and line.count("crusader:") == 1
        for line in lines
    )


def test_lock_released_after_error(console_buffer):
    console, buf = console_buffer
    sink = StatusSink(console)

    try:
        with sink.line():
            raise RuntimeError("render failed")
    except RuntimeError:
        pass

    sink.status("still usable")
    assert buf.getvalue().endswith("crusader: still usable\n")
