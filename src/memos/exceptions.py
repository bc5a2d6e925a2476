"""Exception hierarchy for the notes core."""

from __future__ import annotations


class MemosError(Exception):
    """Base class for every error raised or reported by :mod:`memos`."""


class LoadError(MemosError):
    """The notes document is missing or cannot be parsed."""


class PersistenceError(MemosError):
    """Serializing or writing the notes document failed."""


class IndexOutOfRange(MemosError, IndexError):
    """A positional delete referenced a position outside the collection."""


class DuplicateNoteError(MemosError, ValueError):
    """A note with the same id is already in the collection."""


class DanglingAudioReference(MemosError):
    """A note names an audio file that does not exist in the audio directory."""

    def __init__(self, file_name: str) -> None:
        super().__init__(f"audio file not found: {file_name}")
        self.file_name = file_name
