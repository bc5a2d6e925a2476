"""NotesDB: tabular browse views over the note collection.

Uses DuckDB (in-memory) as a query engine over the notes' text fields and
attachment flags. Returns :mod:`polars` DataFrames for list/table rendering.
The table is a read-only projection; :class:`memos.store.NoteStore` remains
the only writer.

Usage::

    db = NotesDB(store.notes)

    # Free-form SQL
    df = db.query("SELECT title FROM notes WHERE has_image")

    # Pre-built views
    rows    = db.table_view(search="milk")
    counts  = db.category_counts()
    grouped = db.by_category()
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

import duckdb
import polars as pl

from memos.note import Note

_DEFAULT_COLUMNS = ["id", "title", "category", "has_image", "has_audio"]


class NotesDB:
    """In-memory DuckDB table mirroring a note collection."""

    def __init__(self, notes: Iterable[Note] = ()) -> None:
        self.conn: duckdb.DuckDBPyConnection = duckdb.connect(":memory:")
        self.refresh(notes)

    # ------------------------------------------------------------------
    # Build / refresh
    # ------------------------------------------------------------------

    def refresh(self, notes: Iterable[Note]) -> None:
        """(Re-)populate the table from *notes* (call after every store mutation)."""
        self._create_schema()
        self._load_notes(notes)

    def _create_schema(self) -> None:
        self.conn.execute("""
            CREATE OR REPLACE TABLE notes (
                seq             INTEGER PRIMARY KEY,
                id              VARCHAR UNIQUE,
                title           VARCHAR,
                content         TEXT,
                category        VARCHAR,
                has_image       BOOLEAN,
                has_audio       BOOLEAN,
                audio_file_name VARCHAR
            )
        """)

    def _load_notes(self, notes: Iterable[Note]) -> None:
        rows = [
            (
                seq,
                str(note.id),
                note.title,
                note.content,
                note.category,
                note.has_image,
                note.has_audio,
                note.audio_file_name,
            )
            for seq, note in enumerate(notes)
        ]
        if rows:
            self.conn.executemany("INSERT INTO notes VALUES (?,?,?,?,?,?,?,?)", rows)

    # ------------------------------------------------------------------
    # Query
    # ------------------------------------------------------------------

    def query(self, sql: str, params: list[Any] | None = None) -> pl.DataFrame:
        """Run a raw SQL query and return a Polars DataFrame."""
        return self.conn.execute(sql, params or []).pl()

    # ------------------------------------------------------------------
    # Pre-built views
    # ------------------------------------------------------------------

    def table_view(
        self,
        *,
        search: str = "",
        category: str | None = None,
        columns: list[str] | None = None,
    ) -> pl.DataFrame:
        """Return notes in collection order, optionally filtered.

        Parameters
        ----------
        search:
            Case-insensitive substring matched against title, category or
            content. Empty means no filtering, as in
            :func:`memos.search.filter_notes`.
        category:
            Only include notes with exactly this category.
        columns:
            Which columns to include. Defaults to
            ``id, title, category, has_image, has_audio``.
        """
        cols = columns or _DEFAULT_COLUMNS
        unknown = set(cols) - set(self._column_names())
        if unknown:
            raise ValueError(f"unknown columns: {sorted(unknown)}")

        where_clauses: list[str] = []
        params: list[Any] = []
        if search:
            # strpos rather than ILIKE so % and _ in the query stay literal
            where_clauses.append(
                "(strpos(lower(title), ?) > 0"
                " OR strpos(lower(category), ?) > 0"
                " OR strpos(lower(content), ?) > 0)"
            )
            params.extend([search.lower()] * 3)
        if category is not None:
            where_clauses.append("category = ?")
            params.append(category)

        where = f"WHERE {' AND '.join(where_clauses)}" if where_clauses else ""
        sql = f"SELECT {', '.join(cols)} FROM notes {where} ORDER BY seq"
        return self.conn.execute(sql, params).pl()

    def by_category(self) -> dict[str, list[dict[str, Any]]]:
        """Group note rows by category; empty categories go under ``"(none)"``."""
        df = self.conn.execute(
            """
            SELECT
                id, title, has_image, has_audio,
                CASE WHEN category = '' THEN '(none)' ELSE category END AS group_val
            FROM notes
            ORDER BY group_val, seq
            """
        ).pl()

        groups: dict[str, list[dict[str, Any]]] = {}
        for row in df.to_dicts():
            gv = str(row.pop("group_val"))
            groups.setdefault(gv, []).append(row)
        return groups

    def category_counts(self) -> pl.DataFrame:
        """Return a category → count table sorted by frequency."""
        return self.conn.execute(
            """
            SELECT category, COUNT(*) AS note_count
            FROM notes
            GROUP BY category
            ORDER BY note_count DESC, category
            """
        ).pl()

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    def schema_info(self) -> pl.DataFrame:
        """Return DuckDB DESCRIBE output for the notes table."""
        return self.conn.execute("DESCRIBE notes").pl()

    def _column_names(self) -> list[str]:
        return [row[0] for row in self.conn.execute("DESCRIBE notes").fetchall()]

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def close(self) -> None:
        self.conn.close()

    def __enter__(self) -> "NotesDB":
        return self

    def __exit__(self, *_: object) -> None:
        self.close()
