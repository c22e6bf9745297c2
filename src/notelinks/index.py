"""NoteIndex: scans a note directory and builds the link collection."""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable, Iterator
from pathlib import Path

from notelinks.errors import DirectoryNotFound, DirectoryUnreadable, UnreadableNote
from notelinks.note import NoteCollection
from notelinks.parser import parse_note

log = logging.getLogger(__name__)

DEFAULT_EXTENSIONS: tuple[str, ...] = (".md", ".markdown", ".txt")


class NoteIndex:
    """Scans a note directory and collects notes with their outgoing links.

    The collection is rebuilt from disk on every :meth:`build` call; nothing
    is cached between builds and no file is ever written.
    """

    def __init__(self, root: Path | str, extensions: Iterable[str] = DEFAULT_EXTENSIONS) -> None:
        self.root = Path(root)
        self.extensions = tuple(_normalise_extension(e) for e in extensions)
        self.collection = NoteCollection(root=self.root)

    # ------------------------------------------------------------------
    # Build / refresh
    # ------------------------------------------------------------------

    def build(self) -> NoteCollection:
        """(Re-)scan the directory and return a fresh :class:`NoteCollection`."""
        if not self.root.is_dir():
            raise DirectoryNotFound(self.root)
        try:
            with os.scandir(self.root):
                pass
        except OSError as exc:
            raise DirectoryUnreadable(self.root, _describe(exc)) from exc

        collection = NoteCollection(root=self.root)
        for path in self.iter_note_paths(collection.unreadable):
            relpath = path.relative_to(self.root).as_posix()
            try:
                note = parse_note(path, self.root)
            except (OSError, UnicodeDecodeError) as exc:
                reason = _describe(exc)
                log.warning("Skipping unreadable note %s: %s", relpath, reason)
                collection.unreadable.append(UnreadableNote(relpath, reason))
                continue
            log.debug("Parsed %s (%r, %d references)", relpath, note.title, len(note.references))
            collection.notes[relpath] = note

        log.info(
            "Scanned %s: notes=%d references=%d unreadable=%d",
            self.root,
            len(collection.notes),
            len(collection.references),
            len(collection.unreadable),
        )
        self.collection = collection
        return collection

    def iter_note_paths(self, unreadable: list[UnreadableNote] | None = None) -> Iterator[Path]:
        """Yield note files under the root in sorted relative-path order.

        Sub-directories that cannot be listed are skipped and, when given,
        appended to *unreadable*.
        """
        candidates: list[Path] = []

        def _on_error(exc: OSError) -> None:
            relpath = Path(exc.filename or self.root).relative_to(self.root).as_posix()
            reason = f"directory could not be listed: {_describe(exc)}"
            log.warning("Skipping unreadable directory %s: %s", relpath, reason)
            if unreadable is not None:
                unreadable.append(UnreadableNote(relpath, reason))

        for dirpath, dirnames, filenames in os.walk(self.root, onerror=_on_error):
            dirnames[:] = [d for d in dirnames if not d.startswith(".")]
            base = Path(dirpath)
            candidates.extend(
                base / name
                for name in filenames
                if not name.startswith(".") and Path(name).suffix.lower() in self.extensions
            )
        yield from sorted(candidates, key=lambda p: p.relative_to(self.root).as_posix())


def build_collection(root: Path | str, extensions: Iterable[str] = DEFAULT_EXTENSIONS) -> NoteCollection:
    """Shortcut for ``NoteIndex(root, extensions).build()``."""
    return NoteIndex(root, extensions).build()


def _normalise_extension(ext: str) -> str:
    ext = ext.strip().lower()
    return ext if ext.startswith(".") else f".{ext}"


def _describe(exc: BaseException) -> str:
    if isinstance(exc, UnicodeDecodeError):
        return f"not valid UTF-8 text (byte {exc.start})"
    if isinstance(exc, OSError) and exc.strerror:
        return exc.strerror
    return str(exc) or type(exc).__name__
