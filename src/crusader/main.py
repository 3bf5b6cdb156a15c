from __future__ import annotations

import argparse
import sys

from crusader.bootstrap import bootstrap_base_env, bootstrap_run_context


def _dispatch_help(parser: argparse.ArgumentParser, argv: list[str]) -> int:
    # Support:
    #   crusader help
    #   crusader help run
    #   crusader run help
    if argv and argv[0] == "help":
        argv = argv[1:]
    if argv and argv[-1] == "help":
        argv = argv[:-1]

    if not argv:
        parser.print_help()
        return 0

    try:
        build_parser().parse_args(argv + ["--help"])
    except SystemExit:
        pass
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="crusader",
        description="Reverse dependency regression testing for crates",
    )

    sub = p.add_subparsers(dest="command", required=True)

    help_cmd = sub.add_parser("help", help="Show help")
    help_cmd.add_argument("path", nargs="*", help="Command path to show help for")
    help_cmd.set_defaults(_help=True)

    # Keep imports inside builder to avoid early side effects.
    from crusader.cli.cli_env import build_env_parser
    from crusader.cli.cli_run import build_run_parser

    build_run_parser(sub)
    build_env_parser(sub)

    return p


def main(argv: list[str] | None = None) -> int:
    argv = list(sys.argv[1:] if argv is None else argv)

    bootstrap_base_env()

    parser = build_parser()
    args, unknown = parser.parse_known_args(argv)

    # Unified help routing
    if getattr(args, "_help", False) or (unknown and unknown[-1] == "help"):
        return _dispatch_help(parser, argv)
    if unknown:
        parser.error(f"unrecognized arguments: {' '.join(unknown)}")

    # Stamp run context early so configuration and logging see it
    bootstrap_run_context(
        command=args.command,
        manifest=getattr(args, "manifest", None),
        jobs=getattr(args, "jobs", None),
        verbose=True if getattr(args, "verbose", False) else None,
        quiet=True if getattr(args, "quiet", False) else None,
    )

    # Initialize logging AFTER run-context env stamping
    from crusader.logger import init_logging, get_logger

    init_logging()

    log = get_logger("crusader")
    log.debug(f"Command: {args.command}")

    # Dispatch
    if args.command == "run":
        from crusader.cli.cli_run import handle_run

        return handle_run(args)

    if args.command == "env":
        from crusader.cli.cli_env import handle_env

        return handle_env(args)

    raise RuntimeError(f"Unknown command: {args.command}")
