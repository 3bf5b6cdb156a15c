from __future__ import annotations

from typing import Optional

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from crusader.errors import CrusaderError
from crusader.ui.console import build_console

# Lines of build stderr shown for a regression.
STDERR_TAIL_LINES = 20


def _tail(text: str, lines: int = STDERR_TAIL_LINES) -> str:
    return "\n".join(text.rstrip().splitlines()[-lines:])


def _detail(result) -> str:
    if result.error is not None:
        return escape(str(result.error))
    return ""


def report_results(outcome, console: Optional[Console] = None) -> None:
    """
    Final dump of the run: every result in discovery order, error details,
    WIP compiler output for regressions, and the run-wide tally.
    """
    console = console or build_console()

    table = Table(title="crusader results", show_lines=False)
    table.add_column("#", justify="right")
    table.add_column("crate")
    table.add_column("version")
    table.add_column("verdict")
    table.add_column("detail", overflow="fold")

    for i, r in enumerate(outcome.results, start=1):
        table.add_row(
            str(i),
            r.rev_dep.name,
            str(r.rev_dep.vers),
            f"[{r.verdict.color}]{r.quick_str()}[/{r.verdict.color}]",
            _detail(r),
        )

    console.print()
    console.print(table)

    for r in outcome.results:
        if r.next is not None and r.next.failed():
            name = escape(str(r.rev_dep))
            console.print(f"\n[bold]{name}[/bold] regressed, WIP build stderr:")
            console.print(_tail(r.next.stderr), markup=False, highlight=False)

    console.print(f"\nresults: {outcome.summary()}")


def report_error(error: CrusaderError, console: Optional[Console] = None) -> None:
    console = console or build_console()
    console.print(
        f"[bold red]crusader: error[/bold red] {escape(str(error))}", highlight=False
    )
