"""WikiLink and YAML-frontmatter parser."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Any

import yaml

from notelinks.note import Note, Reference

# [[Target]], [[Target|Alias]] or [[Target#Heading]]
_WIKILINK_RE = re.compile(r"\[\[([^\]|#]+)(?:[|#][^\]]*)?\]\]")
# Inline code spans: `code` or ``code with ` inside``
_CODE_SPAN_RE = re.compile(r"(`+)(.+?)\1")
# Opening / closing fence of a fenced code block; closed by a run at least as long
_FENCE_RE = re.compile(r"^\s*(`{3,}|~{3,})")
# YAML front-matter block
_FRONTMATTER_RE = re.compile(r"^---[ \t]*\n(.*?)\n---[ \t]*\n", re.DOTALL)


def parse_frontmatter(content: str) -> tuple[dict[str, Any], str]:
    """Split YAML front-matter from body text.

    Returns ``(metadata_dict, body)``; ``metadata_dict`` is empty when there
    is no front-matter block or when the block is not a YAML mapping.
    """
    match = _FRONTMATTER_RE.match(content)
    if not match:
        return {}, content
    try:
        meta = yaml.safe_load(match.group(1)) or {}
    except yaml.YAMLError:
        meta = {}
    if not isinstance(meta, dict):
        meta = {}
    return meta, content[match.end() :]


def parse_wikilinks(text: str, *, first_line: int = 1) -> list[tuple[str, int]]:
    """Return every ``[[WikiLink]]`` target in *text* with its line number.

    One entry per occurrence, in order of appearance.  Links inside fenced
    code blocks and inline code spans are skipped, as are same-note anchors
    (``[[#Heading]]``) and blank targets.  *first_line* is the file line
    number of the first line of *text*.
    """
    result: list[tuple[str, int]] = []
    fence: str | None = None
    for line_no, line in enumerate(text.splitlines(), start=first_line):
        fence_match = _FENCE_RE.match(line)
        if fence_match:
            marker = fence_match.group(1)
            if fence is None:
                fence = marker
            elif marker[0] == fence[0] and len(marker) >= len(fence):
                fence = None
            continue
        if fence is not None:
            continue

        visible = _CODE_SPAN_RE.sub(lambda m: " " * len(m.group(0)), line)
        for m in _WIKILINK_RE.finditer(visible):
            target = m.group(1)
            if target.strip():
                result.append((target, line_no))
    return result


def note_title(path: Path, frontmatter: dict[str, Any]) -> str:
    """Front-matter ``title`` when set, otherwise the filename stem."""
    title = frontmatter.get("title")
    if title is None or title == "":
        return path.stem
    return str(title)


def parse_note(path: Path, root: Path | None = None) -> Note:
    """Read a note file and return a fully-populated :class:`Note`.

    Raises :class:`OSError` or :class:`UnicodeDecodeError` when the file
    cannot be read; callers decide how to report that.
    """
    content = path.read_text(encoding="utf-8")
    frontmatter, body = parse_frontmatter(content)
    offset = content[: len(content) - len(body)].count("\n")

    relpath = path.relative_to(root).as_posix() if root is not None else path.name
    title = note_title(path, frontmatter)
    references = [
        Reference(source=title, target=target, line=line, source_path=relpath)
        for target, line in parse_wikilinks(body, first_line=offset + 1)
    ]
    return Note(
        path=path,
        relpath=relpath,
        title=title,
        body=body,
        references=references,
        frontmatter=frontmatter,
    )
