"""Resolve ``[[Target]]`` references against the collection's note titles.

Matching is exact after normalisation (surrounding whitespace trimmed,
case-folded).  There is no fuzzy matching: ``[[go - context]]`` finds
``Go - Context`` but ``[[Go Context]]`` does not.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from itertools import combinations
from typing import Any

from notelinks.errors import TitleCollision
from notelinks.note import Note, NoteCollection, Reference

log = logging.getLogger(__name__)


class Status(str, enum.Enum):
    RESOLVED = "resolved"
    BROKEN = "broken"
    #: Target key is shared by colliding titles; blocked by a TitleCollision
    AMBIGUOUS = "ambiguous"


def normalise_title(text: str) -> str:
    """Key used to compare link targets with note titles."""
    return text.strip().casefold()


@dataclass(frozen=True)
class ResolvedReference:
    reference: Reference
    status: Status
    #: relpath of the note the reference points at (RESOLVED only)
    target_path: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data = self.reference.to_dict()
        data["status"] = self.status.value
        data["resolved_to"] = self.target_path
        return data


@dataclass
class Resolution:
    references: list[ResolvedReference] = field(default_factory=list)
    collisions: list[TitleCollision] = field(default_factory=list)
    #: normalised title -> relpath, ambiguous keys excluded
    title_index: dict[str, str] = field(default_factory=dict)
    ambiguous_keys: set[str] = field(default_factory=set)

    def with_status(self, status: Status) -> list[ResolvedReference]:
        return [r for r in self.references if r.status is status]

    @property
    def resolved(self) -> list[ResolvedReference]:
        return self.with_status(Status.RESOLVED)

    @property
    def broken(self) -> list[ResolvedReference]:
        return self.with_status(Status.BROKEN)

    @property
    def ambiguous(self) -> list[ResolvedReference]:
        return self.with_status(Status.AMBIGUOUS)

    def incoming(self, relpath: str) -> list[ResolvedReference]:
        """Resolved references from *other* notes that point at *relpath*."""
        return [
            r
            for r in self.references
            if r.target_path == relpath and r.reference.source_path != relpath
        ]


# ---------------------------------------------------------------------------
# Title index
# ---------------------------------------------------------------------------


def build_title_index(collection: NoteCollection) -> tuple[dict[str, str], list[TitleCollision]]:
    """Map normalised titles to note paths and detect collisions.

    Every pair of distinct notes sharing a key yields one
    :class:`TitleCollision`.  Colliding keys are left out of the index.
    """
    groups: dict[str, list[Note]] = {}
    for note in collection:
        groups.setdefault(normalise_title(note.title), []).append(note)

    index: dict[str, str] = {}
    collisions: list[TitleCollision] = []
    for key, notes in groups.items():
        if len(notes) == 1:
            index[key] = notes[0].relpath
            continue
        ordered = sorted(notes, key=lambda n: (n.title, n.relpath))
        for first, second in combinations(ordered, 2):
            collisions.append(
                TitleCollision(
                    key=key,
                    first_title=first.title,
                    first_path=first.relpath,
                    second_title=second.title,
                    second_path=second.relpath,
                )
            )
    collisions.sort()
    for collision in collisions:
        log.warning(
            "Title collision on %r: %s (%r) and %s (%r)",
            collision.key,
            collision.first_path,
            collision.first_title,
            collision.second_path,
            collision.second_title,
        )
    return index, collisions


# ---------------------------------------------------------------------------
# Resolve
# ---------------------------------------------------------------------------


def resolve(collection: NoteCollection) -> Resolution:
    """Classify every reference in *collection* as resolved, broken or ambiguous."""
    index, collisions = build_title_index(collection)
    ambiguous_keys = {c.key for c in collisions}

    resolution = Resolution(collisions=collisions, title_index=index, ambiguous_keys=ambiguous_keys)
    for note in collection:
        for ref in note.references:
            key = normalise_title(ref.target)
            if key in index:
                resolution.references.append(ResolvedReference(ref, Status.RESOLVED, index[key]))
            elif key in ambiguous_keys:
                resolution.references.append(ResolvedReference(ref, Status.AMBIGUOUS))
            else:
                log.debug("Broken reference in %s line %d: [[%s]]", ref.source_path, ref.line, ref.target)
                resolution.references.append(ResolvedReference(ref, Status.BROKEN))

    log.info(
        "Resolved references: resolved=%d broken=%d ambiguous=%d collisions=%d",
        len(resolution.resolved),
        len(resolution.broken),
        len(resolution.ambiguous),
        len(collisions),
    )
    return resolution
