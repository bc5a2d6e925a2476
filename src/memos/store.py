"""NoteStore: owner of the note collection and its durable JSON document.

The whole collection is re-serialized on every mutation and written with an
atomic replace (temporary file in the same directory, then ``os.replace``),
so the canonical document is always either the previous or the new state.

Usage::

    store = NoteStore.open(settings.notes_path)
    store.add(Note.create("Shopping", "milk", "Home"))
    store.delete(note.id)
    store.delete_at(0)
"""

from __future__ import annotations

import json
import logging
import os
import stat
import tempfile
import uuid
from collections.abc import Iterable, Iterator
from pathlib import Path

from memos.exceptions import DuplicateNoteError, IndexOutOfRange, LoadError, PersistenceError
from memos.note import Note

logger = logging.getLogger(__name__)


class NoteStore:
    """In-memory note collection mirrored to a single JSON document."""

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)
        self._notes: list[Note] = []
        #: Outcome of the most recent :meth:`save`; ``None`` on success
        self.last_error: PersistenceError | None = None

    @classmethod
    def open(cls, path: Path | str) -> "NoteStore":
        """Construct a store and load its document (the startup path)."""
        store = cls(path)
        store.load()
        return store

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    @property
    def notes(self) -> list[Note]:
        """Snapshot of the collection in insertion order."""
        return list(self._notes)

    def get(self, note_id: uuid.UUID) -> Note | None:
        for note in self._notes:
            if note.id == note_id:
                return note
        return None

    def __len__(self) -> int:
        return len(self._notes)

    def __iter__(self) -> Iterator[Note]:
        return iter(list(self._notes))

    def __contains__(self, note_id: object) -> bool:
        return any(n.id == note_id for n in self._notes)

    # ------------------------------------------------------------------
    # Load
    # ------------------------------------------------------------------

    def load(self) -> list[Note]:
        """Replace the collection with the document's contents.

        A missing or unreadable document yields an empty collection and a
        logged warning; this never raises.
        """
        try:
            self._notes = self._read()
        except LoadError as exc:
            logger.warning("No saved notes loaded, starting empty: %s", exc)
            self._notes = []
        else:
            logger.debug("Loaded %d notes from %s", len(self._notes), self.path)
        return self.notes

    def _read(self) -> list[Note]:
        try:
            raw = self.path.read_bytes()
        except FileNotFoundError as exc:
            raise LoadError(f"{self.path} does not exist") from exc
        except OSError as exc:
            raise LoadError(f"cannot read {self.path}: {exc}") from exc

        try:
            records = json.loads(raw.decode("utf-8"))
        except (ValueError, RecursionError) as exc:
            raise LoadError(f"{self.path} is not valid JSON: {exc}") from exc
        if not isinstance(records, list):
            raise LoadError(f"{self.path} does not contain a JSON array")

        notes: list[Note] = []
        seen: set[uuid.UUID] = set()
        for position, record in enumerate(records):
            if not isinstance(record, dict):
                raise LoadError(f"record {position} is not an object")
            try:
                note = Note.from_dict(record)
            except (KeyError, ValueError, TypeError) as exc:
                raise LoadError(f"record {position} is malformed: {exc!r}") from exc
            if note.id in seen:
                raise LoadError(f"record {position} repeats id {note.id}")
            seen.add(note.id)
            notes.append(note)
        return notes

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def add(self, note: Note) -> None:
        """Append *note* and persist. Raises :class:`DuplicateNoteError` on a reused id."""
        if note.id in self:
            raise DuplicateNoteError(f"note {note.id} is already in the collection")
        self._notes.append(note)
        self.save()

    def delete(self, note_id: uuid.UUID) -> None:
        """Remove the note with *note_id* if present, then persist."""
        self._notes = [n for n in self._notes if n.id != note_id]
        self.save()

    def delete_at(self, position: int) -> None:
        """Remove the note at *position*; raises :class:`IndexOutOfRange` if invalid."""
        self.delete_many([position])

    def delete_many(self, positions: Iterable[int]) -> None:
        """Remove the notes at all *positions* with a single persist.

        Every position is validated before anything is removed, so a bad
        position leaves the collection untouched.
        """
        doomed = set(positions)
        for position in doomed:
            if not 0 <= position < len(self._notes):
                raise IndexOutOfRange(
                    f"position {position} out of range for {len(self._notes)} notes"
                )
        self._notes = [n for i, n in enumerate(self._notes) if i not in doomed]
        self.save()

    # ------------------------------------------------------------------
    # Persist
    # ------------------------------------------------------------------

    def save(self) -> PersistenceError | None:
        """Atomically write the whole collection to :attr:`path`.

        Returns ``None`` on success, or the :class:`PersistenceError` that was
        logged. The in-memory collection is unaffected either way.
        """
        try:
            payload = json.dumps(
                [n.to_dict() for n in self._notes], ensure_ascii=False, indent=2
            ).encode("utf-8")
        except (TypeError, ValueError) as exc:
            return self._fail(PersistenceError(f"cannot serialize notes: {exc}"))

        try:
            self._write_atomic(payload)
        except OSError as exc:
            return self._fail(PersistenceError(f"cannot write {self.path}: {exc}"))

        self.last_error = None
        logger.debug("Saved %d notes to %s", len(self._notes), self.path)
        return None

    def _write_atomic(self, payload: bytes) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(suffix=".json", prefix=".tmp_", dir=self.path.parent)
        try:
            with os.fdopen(fd, "wb") as fh:
                fh.write(payload)
                fh.flush()
                os.fsync(fh.fileno())
            os.chmod(tmp_path, self._file_mode())
            os.replace(tmp_path, self.path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise

    def _file_mode(self) -> int:
        """Mode for the replacement document: the current one's, else 0666 minus umask."""
        try:
            return stat.S_IMODE(os.stat(self.path).st_mode)
        except FileNotFoundError:
            umask = os.umask(0)
            os.umask(umask)
            return 0o666 & ~umask

    def _fail(self, error: PersistenceError) -> PersistenceError:
        logger.error("Saving notes failed, keeping in-memory copy: %s", error)
        self.last_error = error
        return error
