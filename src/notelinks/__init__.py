"""notelinks: wiki-link consistency checker for note collections."""

from notelinks.checker import exit_code, run_check
from notelinks.config import CheckConfig, load_config
from notelinks.db import LinkDB
from notelinks.errors import (
    ConfigError,
    DirectoryNotFound,
    DirectoryUnreadable,
    NotelinksError,
    ReportWriteError,
    TitleCollision,
    UnreadableNote,
)
from notelinks.graph import build_link_graph, find_orphans
from notelinks.index import NoteIndex, build_collection
from notelinks.note import Note, NoteCollection, Reference
from notelinks.parser import parse_note, parse_wikilinks
from notelinks.report import Report, build_report, render
from notelinks.resolver import Resolution, Status, normalise_title, resolve

__version__ = "0.1.0"

__all__ = [
    "CheckConfig",
    "ConfigError",
    "DirectoryNotFound",
    "DirectoryUnreadable",
    "LinkDB",
    "Note",
    "NoteCollection",
    "NoteIndex",
    "NotelinksError",
    "Reference",
    "Report",
    "ReportWriteError",
    "Resolution",
    "Status",
    "TitleCollision",
    "UnreadableNote",
    "build_collection",
    "build_link_graph",
    "build_report",
    "exit_code",
    "find_orphans",
    "load_config",
    "normalise_title",
    "parse_note",
    "parse_wikilinks",
    "render",
    "resolve",
    "run_check",
]
