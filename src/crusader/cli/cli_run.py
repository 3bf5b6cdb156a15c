from __future__ import annotations

import argparse

from crusader.cli.common import positive_int


def build_run_parser(subparsers: argparse._SubParsersAction) -> None:
    run = subparsers.add_parser(
        "run",
        help="Build every reverse dependency against the published and WIP crate",
    )

    run.add_argument(
        "--manifest",
        help="Cargo.toml of the crate under test (default: $CRUSADER_MANIFEST or ./Cargo.toml)",
    )
    run.add_argument(
        "--jobs",
        "-j",
        type=positive_int,
        help="Concurrent builds (default: $CRUSADER_JOBS or CPU count)",
    )
    run.add_argument("--verbose", action="store_true")
    run.add_argument("--quiet", action="store_true")


def handle_run(args: argparse.Namespace) -> int:
    from crusader.config import load_config
    from crusader.env import ConfigError, get_env
    from crusader.errors import CrusaderError
    from crusader.logger import get_logger
    from crusader.runner import run
    from crusader.ui import StatusSink, report_error, report_results

    log = get_logger("crusader")
    sink = StatusSink()

    try:
        config = load_config(get_env())
    except ConfigError as e:
        log.error(f"Configuration error: {e}")
        return 1
    except CrusaderError as e:
        log.error(f"Could not read manifest: {e}")
        report_error(e, sink.console)
        return 1

    log.info(f"Crate: {config.crate_name}")
    log.info(f"Manifest: {config.manifest_path}")
    log.info(f"Registry: {config.registry_url}")

    try:
        outcome = run(config, sink)
    except CrusaderError as e:
        log.error(f"Run aborted: {e}")
        report_error(e, sink.console)
        return 1

    report_results(outcome, sink.console)
    return 0
