"""Report building and rendering.

A :class:`Report` is computed once from a collection and its resolution;
every renderer is a pure function of it.  No timestamps and no absolute
paths go into the output, so two runs over an unchanged directory render
byte-identical reports.
"""

from __future__ import annotations

import json
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, TextIO

import polars as pl

from notelinks.errors import ReportWriteError, TitleCollision, UnreadableNote
from notelinks.graph import find_orphans
from notelinks.note import Note, NoteCollection, Reference
from notelinks.resolver import Resolution


# ---------------------------------------------------------------------------
# Data model
# ---------------------------------------------------------------------------


@dataclass
class BrokenGroup:
    """All broken references of one source note."""

    source: str
    source_path: str
    references: list[Reference] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "source": self.source,
            "source_path": self.source_path,
            "references": [{"target": r.target, "line": r.line} for r in self.references],
        }


@dataclass
class Report:
    notes: int
    references: int
    resolved: int
    ambiguous: int
    broken: list[BrokenGroup] = field(default_factory=list)
    collisions: list[TitleCollision] = field(default_factory=list)
    unreadable: list[UnreadableNote] = field(default_factory=list)
    #: ``None`` when orphan detection was not requested
    orphans: list[Note] | None = None

    @property
    def broken_count(self) -> int:
        return sum(len(g.references) for g in self.broken)

    @property
    def clean(self) -> bool:
        """True when every reference resolves."""
        return self.broken_count == 0

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "summary": {
                "notes": self.notes,
                "references": self.references,
                "resolved": self.resolved,
                "broken": self.broken_count,
                "ambiguous": self.ambiguous,
            },
            "broken": [g.to_dict() for g in self.broken],
            "collisions": [c.to_dict() for c in self.collisions],
            "unreadable": [u.to_dict() for u in self.unreadable],
        }
        if self.orphans is not None:
            data["orphans"] = [{"title": n.title, "relpath": n.relpath} for n in self.orphans]
        return data


def build_report(
    collection: NoteCollection,
    resolution: Resolution,
    *,
    include_orphans: bool = False,
) -> Report:
    """Group and sort the diagnostics of a resolved collection."""
    groups: dict[str, BrokenGroup] = {}
    for item in resolution.broken:
        ref = item.reference
        group = groups.setdefault(ref.source_path, BrokenGroup(ref.source, ref.source_path))
        group.references.append(ref)
    for group in groups.values():
        group.references.sort(key=lambda r: (r.target, r.line))

    return Report(
        notes=len(collection),
        references=len(resolution.references),
        resolved=len(resolution.resolved),
        ambiguous=len(resolution.ambiguous),
        broken=sorted(groups.values(), key=lambda g: (g.source, g.source_path)),
        collisions=sorted(resolution.collisions),
        unreadable=sorted(collection.unreadable),
        orphans=find_orphans(collection, resolution) if include_orphans else None,
    )


# ---------------------------------------------------------------------------
# Renderers
# ---------------------------------------------------------------------------


def render_text(report: Report) -> str:
    lines = [
        f"{report.notes} notes, {report.references} references "
        f"({report.resolved} resolved, {report.broken_count} broken, {report.ambiguous} ambiguous)"
    ]

    if report.broken:
        lines += ["", f"Broken references ({report.broken_count}):"]
        for group in report.broken:
            lines.append(f"  {group.source} [{group.source_path}]")
            lines += [f"    line {r.line}: [[{r.target}]]" for r in group.references]

    if report.collisions:
        lines += ["", f"Title collisions ({len(report.collisions)}):"]
        lines += [
            f"  {c.key!r}: {c.first_title!r} [{c.first_path}] <-> {c.second_title!r} [{c.second_path}]"
            for c in report.collisions
        ]

    if report.unreadable:
        lines += ["", f"Unreadable notes ({len(report.unreadable)}):"]
        lines += [f"  {u.relpath}: {u.reason}" for u in report.unreadable]

    if report.orphans is not None:
        lines += ["", f"Orphan notes ({len(report.orphans)}):"]
        lines += [f"  {n.title} [{n.relpath}]" for n in report.orphans]

    if report.clean and not report.collisions:
        lines += ["", "All references resolve."]
    return "\n".join(lines) + "\n"


def render_json(report: Report) -> str:
    return json.dumps(report.to_dict(), indent=2, ensure_ascii=False) + "\n"


_CSV_SCHEMA = {
    "kind": pl.Utf8,
    "title": pl.Utf8,
    "relpath": pl.Utf8,
    "target": pl.Utf8,
    "line": pl.Int64,
    "detail": pl.Utf8,
}


def report_frame(report: Report) -> pl.DataFrame:
    """Flatten every diagnostic into one row per item."""
    rows: list[dict[str, Any]] = []
    for group in report.broken:
        for ref in group.references:
            rows.append(
                {
                    "kind": "broken",
                    "title": group.source,
                    "relpath": group.source_path,
                    "target": ref.target,
                    "line": ref.line,
                    "detail": None,
                }
            )
    for c in report.collisions:
        rows.append(
            {
                "kind": "collision",
                "title": c.first_title,
                "relpath": c.first_path,
                "target": c.second_title,
                "line": None,
                "detail": c.second_path,
            }
        )
    for u in report.unreadable:
        rows.append(
            {
                "kind": "unreadable",
                "title": None,
                "relpath": u.relpath,
                "target": None,
                "line": None,
                "detail": u.reason,
            }
        )
    for n in report.orphans or []:
        rows.append(
            {
                "kind": "orphan",
                "title": n.title,
                "relpath": n.relpath,
                "target": None,
                "line": None,
                "detail": None,
            }
        )
    return pl.DataFrame(rows, schema=_CSV_SCHEMA)


def render_csv(report: Report) -> str:
    return report_frame(report).write_csv()


RENDERERS: dict[str, Callable[[Report], str]] = {
    "text": render_text,
    "json": render_json,
    "csv": render_csv,
}


def render(report: Report, fmt: str = "text") -> str:
    try:
        renderer = RENDERERS[fmt]
    except KeyError:
        raise ValueError(f"Unknown report format {fmt!r}; expected one of {sorted(RENDERERS)}") from None
    return renderer(report)


# ---------------------------------------------------------------------------
# Output
# ---------------------------------------------------------------------------


def write_report(text: str, destination: Path | str | None = None, *, stream: TextIO | None = None) -> None:
    """Write *text* to *destination*, or to *stream* / stdout when it is ``None``.

    Any failure raises :class:`ReportWriteError`; there are no retries.
    """
    if destination is None:
        out = stream or sys.stdout
        try:
            out.write(text)
            out.flush()
        except OSError as exc:
            raise ReportWriteError("<stdout>", exc.strerror or str(exc)) from exc
        return

    path = Path(destination)
    try:
        path.write_text(text, encoding="utf-8")
    except OSError as exc:
        raise ReportWriteError(path, exc.strerror or str(exc)) from exc
