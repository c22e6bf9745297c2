"""Run a full check: build -> resolve -> report."""

from __future__ import annotations

import logging

from notelinks.config import CheckConfig
from notelinks.index import NoteIndex
from notelinks.note import NoteCollection
from notelinks.report import Report, build_report
from notelinks.resolver import Resolution, resolve

log = logging.getLogger(__name__)

#: Report produced; content clean, or broken references are informational
EXIT_OK = 0
#: Strict mode and at least one broken reference
EXIT_BROKEN = 1
#: The tool could not run (missing or unlistable directory, title collision, bad config,
#: write failure, failed SQL query)
EXIT_ERROR = 2


def load(config: CheckConfig) -> tuple[NoteCollection, Resolution]:
    """Scan ``config.directory`` and resolve every reference.

    Raises :class:`~notelinks.errors.DirectoryNotFound` or
    :class:`~notelinks.errors.DirectoryUnreadable` before doing any work
    when the directory is missing or cannot be listed.
    """
    collection = NoteIndex(config.directory, config.extensions).build()
    return collection, resolve(collection)


def run_check(config: CheckConfig) -> Report:
    """Scan ``config.directory`` and return the finished :class:`Report`."""
    collection, resolution = load(config)
    return build_report(collection, resolution, include_orphans=config.include_orphans)


def exit_code(report: Report, *, strict: bool = False) -> int:
    if report.collisions:
        return EXIT_ERROR
    if strict and not report.clean:
        return EXIT_BROKEN
    return EXIT_OK
