import sys

from rich.console import Console


def build_console() -> Console:
    # Status lines and the final report go to stdout; logging uses stderr.
    return Console(file=sys.stdout, soft_wrap=True, highlight=False)
