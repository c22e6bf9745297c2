"""Core Note, Reference and NoteCollection dataclasses."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from notelinks.errors import UnreadableNote


@dataclass(frozen=True)
class Reference:
    """One ``[[Target]]`` occurrence inside a note."""

    #: Title of the note that contains the link
    source: str
    #: Target text exactly as written, without any ``|alias`` or ``#heading``
    target: str
    line: int
    #: Relative path of the source note (titles are not guaranteed unique)
    source_path: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "source": self.source,
            "source_path": self.source_path,
            "target": self.target,
            "line": self.line,
        }


@dataclass
class Note:
    """A single text note in the collection."""

    path: Path
    relpath: str
    title: str
    body: str
    #: Every outgoing reference in order of appearance, duplicates kept
    references: list[Reference] = field(default_factory=list)
    frontmatter: dict[str, Any] = field(default_factory=dict)

    @property
    def targets(self) -> list[str]:
        return [ref.target for ref in self.references]


@dataclass
class NoteCollection:
    """Every note found under *root*, keyed by POSIX relative path."""

    root: Path
    notes: dict[str, Note] = field(default_factory=dict)
    unreadable: list[UnreadableNote] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.notes)

    def __iter__(self) -> Iterator[Note]:
        return iter(self.notes.values())

    @property
    def references(self) -> list[Reference]:
        return [ref for note in self.notes.values() for ref in note.references]
