"""Exceptions and per-note diagnostics.

Fatal conditions are exceptions derived from :class:`NotelinksError` and
abort the run.  Recoverable conditions (:class:`UnreadableNote`,
:class:`TitleCollision`) are plain records collected during the scan and
attached to the final report.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any


class NotelinksError(Exception):
    """Base class for errors that stop a check from running."""


class DirectoryNotFound(NotelinksError):
    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)
        super().__init__(f"Note directory not found: {self.path}")


class DirectoryUnreadable(NotelinksError):
    def __init__(self, path: Path | str, reason: str) -> None:
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"Note directory cannot be listed: {self.path} ({reason})")


class ConfigError(NotelinksError):
    pass


class ReportWriteError(NotelinksError):
    def __init__(self, path: Path | str, reason: str) -> None:
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"Cannot write report to {self.path}: {reason}")


# ---------------------------------------------------------------------------
# Diagnostics
# ---------------------------------------------------------------------------


@dataclass(frozen=True, order=True)
class UnreadableNote:
    relpath: str
    reason: str

    def to_dict(self) -> dict[str, Any]:
        return {"relpath": self.relpath, "reason": self.reason}


@dataclass(frozen=True, order=True)
class TitleCollision:
    """Two distinct notes whose titles normalise to the same key."""

    key: str
    first_title: str
    first_path: str
    second_title: str
    second_path: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "key": self.key,
            "notes": [
                {"title": self.first_title, "relpath": self.first_path},
                {"title": self.second_title, "relpath": self.second_path},
            ],
        }
