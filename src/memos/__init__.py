"""MemoSmart notes core library."""

from memos.audio import AudioLibrary
from memos.config import Settings
from memos.db import NotesDB
from memos.exceptions import (
    DanglingAudioReference,
    DuplicateNoteError,
    IndexOutOfRange,
    LoadError,
    MemosError,
    PersistenceError,
)
from memos.log import configure_logging
from memos.note import Note
from memos.search import filter_notes, matches
from memos.store import NoteStore

__all__ = [
    "Note",
    "NoteStore",
    "filter_notes",
    "matches",
    "AudioLibrary",
    "NotesDB",
    "Settings",
    "configure_logging",
    "MemosError",
    "LoadError",
    "PersistenceError",
    "IndexOutOfRange",
    "DuplicateNoteError",
    "DanglingAudioReference",
]
