"""LinkDB: SQL view over a resolved note collection.

Uses DuckDB (in-memory) as a query engine over the notes and their
classified references.  Returns :mod:`polars` DataFrames.  Nothing is
persisted: the database lives only as long as the :class:`LinkDB`.

From the command line, ``notelinks NOTES --sql "SELECT ..."`` prints the
result of one query against a freshly scanned directory.

Usage::

    with LinkDB(collection, resolution) as db:
        db.query("SELECT source_title, target FROM refs WHERE status = 'broken'")
        db.broken_view()
        db.incoming_counts()
        db.orphan_view()
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import duckdb
import polars as pl

if TYPE_CHECKING:
    from notelinks.note import NoteCollection
    from notelinks.resolver import Resolution


class LinkDB:
    """In-memory DuckDB database of notes and references."""

    def __init__(self, collection: "NoteCollection", resolution: "Resolution") -> None:
        self.conn: duckdb.DuckDBPyConnection = duckdb.connect(":memory:")
        self.refresh(collection, resolution)

    # ------------------------------------------------------------------
    # Build / refresh
    # ------------------------------------------------------------------

    def refresh(self, collection: "NoteCollection", resolution: "Resolution") -> None:
        """(Re-)populate the database (call after a rebuild)."""
        self._create_schema()
        self._load(collection, resolution)

    def _create_schema(self) -> None:
        self.conn.execute("""
            CREATE OR REPLACE TABLE notes (
                relpath     VARCHAR PRIMARY KEY,
                title       VARCHAR,
                path        VARCHAR
            )
        """)
        self.conn.execute("""
            CREATE OR REPLACE TABLE refs (
                source        VARCHAR,
                source_title  VARCHAR,
                target        VARCHAR,
                line          INTEGER,
                status        VARCHAR,
                resolved_to   VARCHAR
            )
        """)

    def _load(self, collection: "NoteCollection", resolution: "Resolution") -> None:
        notes = [(n.relpath, n.title, str(n.path)) for n in collection]
        if notes:
            self.conn.executemany("INSERT INTO notes VALUES (?,?,?)", notes)
        refs = [
            (
                r.reference.source_path,
                r.reference.source,
                r.reference.target,
                r.reference.line,
                r.status.value,
                r.target_path,
            )
            for r in resolution.references
        ]
        if refs:
            self.conn.executemany("INSERT INTO refs VALUES (?,?,?,?,?,?)", refs)

    # ------------------------------------------------------------------
    # Query
    # ------------------------------------------------------------------

    def query(self, sql: str, params: list | None = None) -> pl.DataFrame:
        """Run a raw SQL query and return a Polars DataFrame."""
        return self.conn.execute(sql, params or []).pl()

    # ------------------------------------------------------------------
    # Pre-built views
    # ------------------------------------------------------------------

    def broken_view(self) -> pl.DataFrame:
        """Broken references sorted by source title, target text, line."""
        return self.query(
            """
            SELECT source_title, source, target, line
            FROM refs
            WHERE status = 'broken'
            ORDER BY source_title, source, target, line
            """
        )

    def incoming_counts(self) -> pl.DataFrame:
        """Resolved incoming references per note, self-links excluded.

        Notes without any incoming link are listed with ``incoming = 0``.
        """
        return self.query(
            """
            SELECT n.relpath, n.title, COUNT(r.source) AS incoming
            FROM notes n
            LEFT JOIN refs r
              ON r.resolved_to = n.relpath
             AND r.status = 'resolved'
             AND r.source <> n.relpath
            GROUP BY n.relpath, n.title
            ORDER BY incoming DESC, n.title, n.relpath
            """
        )

    def orphan_view(self) -> pl.DataFrame:
        """Notes that no other note links to."""
        return self.incoming_counts().filter(pl.col("incoming") == 0).sort(["title", "relpath"])

    def status_counts(self) -> pl.DataFrame:
        return self.query(
            """
            SELECT status, COUNT(*) AS refs
            FROM refs
            GROUP BY status
            ORDER BY status
            """
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def close(self) -> None:
        self.conn.close()

    def __enter__(self) -> "LinkDB":
        return self

    def __exit__(self, *_: object) -> None:
        self.close()


def render_frame(frame: pl.DataFrame, fmt: str = "text") -> str:
    """Render a query result as ``text`` (a full table), ``json`` or ``csv``."""
    if fmt == "json":
        return frame.write_json() + "\n"
    if fmt == "csv":
        return frame.write_csv()
    with pl.Config(tbl_rows=-1, tbl_cols=-1, fmt_str_lengths=200):
        return f"{frame}\n"
