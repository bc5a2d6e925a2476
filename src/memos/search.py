"""Search/filter over a note collection.

Linear, case-insensitive substring matching on title, category and content.
Kept as a pure function of ``(notes, query)`` so an indexed implementation
can replace it without touching :class:`memos.store.NoteStore`.
"""

from __future__ import annotations

from collections.abc import Iterable

from memos.note import Note


def matches(note: Note, query: str) -> bool:
    """Return ``True`` when *query* occurs in the note's title, category or content.

    The comparison lowercases both sides; *query* is not trimmed, so an
    all-whitespace query must literally appear.
    """
    q = query.lower()
    return q in note.title.lower() or q in note.category.lower() or q in note.content.lower()


def filter_notes(notes: Iterable[Note], query: str) -> list[Note]:
    """Return the notes visible for *query*, in their original order.

    An empty query returns every note.
    """
    if query == "":
        return list(notes)
    return [n for n in notes if matches(n, query)]
