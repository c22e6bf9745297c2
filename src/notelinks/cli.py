"""``notelinks`` command-line entry point."""

from __future__ import annotations

import argparse
import logging
from collections.abc import Sequence
from pathlib import Path

import duckdb

from notelinks import __version__
from notelinks.checker import EXIT_ERROR, EXIT_OK, exit_code, load, run_check
from notelinks.config import CheckConfig, load_config
from notelinks.db import LinkDB, render_frame
from notelinks.errors import NotelinksError
from notelinks.logging_setup import setup_logging
from notelinks.report import RENDERERS, render, write_report

log = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="notelinks",
        description="Check that [[wiki links]] between notes resolve to existing notes.",
    )
    parser.add_argument("directory", type=Path, help="directory of note files")
    parser.add_argument(
        "--include-orphans",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="also list notes that no other note links to",
    )
    parser.add_argument(
        "--strict",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="exit with status 1 when any reference is broken",
    )
    parser.add_argument("--format", choices=sorted(RENDERERS), default=None, help="report format (default: text)")
    parser.add_argument("-o", "--output", type=Path, default=None, help="write the report to FILE instead of stdout")
    parser.add_argument(
        "--ext",
        dest="extensions",
        action="append",
        default=None,
        metavar="EXT",
        help="note file extension; repeatable (default: .md .markdown .txt)",
    )
    parser.add_argument(
        "--sql",
        default=None,
        metavar="QUERY",
        help="run QUERY against the notes and refs tables and print the result instead of the report",
    )
    parser.add_argument("--config", type=Path, default=None, help="read options from this TOML file")
    parser.add_argument("-v", "--verbose", action="count", default=0, help="more log output on stderr")
    parser.add_argument("-q", "--quiet", action="store_true", help="only log errors")
    parser.add_argument("--log-file", type=Path, default=None, help="also write a debug log to FILE")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(-1 if args.quiet else args.verbose, args.log_file)

    overrides = {
        "include_orphans": args.include_orphans,
        "strict": args.strict,
        "format": args.format,
        "output": args.output,
        "extensions": args.extensions,
    }
    try:
        config = load_config(args.directory, config_file=args.config, overrides=overrides)
        if args.sql is not None:
            return run_query(config, args.sql)
        report = run_check(config)
        write_report(render(report, config.format), config.output)
    except NotelinksError as exc:
        log.error("%s", exc)
        return EXIT_ERROR

    if report.collisions:
        log.error("%d title collision(s) found; affected links cannot be resolved", len(report.collisions))
    return exit_code(report, strict=config.strict)


def run_query(config: CheckConfig, sql: str) -> int:
    """Print the result of *sql* run against a :class:`LinkDB` of the directory."""
    collection, resolution = load(config)
    with LinkDB(collection, resolution) as db:
        try:
            frame = db.query(sql)
        except duckdb.Error as exc:
            log.error("SQL query failed: %s", exc)
            return EXIT_ERROR
    write_report(render_frame(frame, config.format), config.output)
    return EXIT_OK
