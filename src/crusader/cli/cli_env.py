from __future__ import annotations

import argparse

from rich.markup import escape
from rich.table import Table

from crusader.cli.common import dispatch_subparser_help
from crusader.env import get_env
from crusader.ui.console import build_console


def build_env_parser(subparsers: argparse._SubParsersAction) -> None:
    env = subparsers.add_parser("env", help="Environment utilities")
    sub = env.add_subparsers(dest="env_cmd", required=True)

    help_p = sub.add_parser("help", help="Show help for env")
    help_p.add_argument("path", nargs="*", help="Subcommand path")
    help_p.set_defaults(action="help", _help_parser=env)

    dump_p = sub.add_parser("dump", help="Show resolved runtime environment")
    dump_p.set_defaults(action="dump")


def handle_env(args: argparse.Namespace) -> int:
    if args.action == "help":
        return dispatch_subparser_help(
            args._help_parser, list(getattr(args, "path", []) or [])
        )

    if args.action == "dump":
        return handle_env_dump()

    raise RuntimeError(f"Unknown env action: {args.action}")


def _crate_section(env) -> dict:
    """What a run would test, or why it could not start."""
    from crusader.config import load_config
    from crusader.errors import CrusaderError

    try:
        config = load_config(env)
    except CrusaderError as e:
        return {"crate_name": f"unavailable ({e})"}

    return {
        "crate_name": config.crate_name,
        "baseline": config.base_override.describe(),
        "wip": config.next_override.describe(),
    }


def handle_env_dump() -> int:
    env = get_env()
    sections = {"Crate": _crate_section(env), **env.as_dict()}

    table = Table(title="Runtime Environment", title_justify="left")
    table.add_column("Section", style="bold cyan")
    table.add_column("Setting")
    table.add_column("Value", overflow="fold")

    for section, values in sections.items():
        for i, (key, value) in enumerate(values.items()):
            table.add_row(section if i == 0 else "", key, escape(str(value)))

    build_console().print(table)
    return 0
