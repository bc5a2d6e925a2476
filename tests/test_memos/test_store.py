"""Unit tests for memos.store.NoteStore."""

import json
import logging
import os
import uuid
from pathlib import Path

import pytest

from memos.exceptions import DuplicateNoteError, IndexOutOfRange, PersistenceError
from memos.note import Note
from memos.store import NoteStore

# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def notes_path(tmp_path: Path) -> Path:
    return tmp_path / "notes.json"


@pytest.fixture()
def three(notes_path: Path) -> NoteStore:
    """Store holding three notes, one of them with image and audio."""
    store = NoteStore.open(notes_path)
    store.add(Note.create("First", "one", "Home"))
    store.add(Note.create("Second", "two", "Work", image=b"\x89PNG\r\n", audio_file_name="A.m4a"))
    store.add(Note.create("Third", "three", ""))
    return store


def _titles(store: NoteStore) -> list[str]:
    return [n.title for n in store.notes]


# ---------------------------------------------------------------------------
# load()
# ---------------------------------------------------------------------------


class TestLoad:
    def test_missing_document_gives_empty_collection(self, notes_path: Path):
        store = NoteStore(notes_path)
        assert store.load() == []
        assert len(store) == 0

    def test_missing_document_logs_warning(self, notes_path: Path, caplog):
        with caplog.at_level(logging.WARNING, logger="memos.store"):
            NoteStore.open(notes_path)
        assert "starting empty" in caplog.text

    @pytest.mark.parametrize(
        "payload",
        [
            "{not json",
            '{"id": "x"}',
            '[{"title": "no id", "content": "", "category": ""}]',
            '[{"id": "not-a-uuid", "title": "", "content": "", "category": ""}]',
            '["just a string"]',
            '[{"id": 5, "title": "", "content": "", "category": ""}]',
            '[{"id": ["x"], "title": "", "content": "", "category": ""}]',
            '[{"id": "7b0d8f56-3a57-4a53-9d7a-1f4f9b6c2e11", "title": null, "content": "", "category": ""}]',
            '[{"id": "7b0d8f56-3a57-4a53-9d7a-1f4f9b6c2e11", "title": "", "content": "", "category": "", "imageData": 5}]',
            '[{"id": "7b0d8f56-3a57-4a53-9d7a-1f4f9b6c2e11", "title": "", "content": "", "category": "", "imageData": "caff\u00e8"}]',
            '[{"id": "7b0d8f56-3a57-4a53-9d7a-1f4f9b6c2e11", "title": "", "content": "", "category": "", "audioFileName": {}}]',
        ],
    )
    def test_unreadable_document_gives_empty_collection(self, notes_path: Path, payload: str):
        notes_path.write_text(payload, encoding="utf-8")
        store = NoteStore.open(notes_path)
        assert store.notes == []

    @pytest.mark.parametrize(
        "payload",
        [
            b'[{"id": "\xff\xfe"}]',
            b"\x80\x81\x82",
            "[]".encode("utf-16"),
        ],
    )
    def test_undecodable_bytes_give_empty_collection(self, notes_path: Path, payload: bytes):
        notes_path.write_bytes(payload)
        assert NoteStore.open(notes_path).notes == []

    def test_deeply_nested_document_gives_empty_collection(self, notes_path: Path, caplog):
        notes_path.write_text("[" * 200_000, encoding="utf-8")
        with caplog.at_level(logging.WARNING, logger="memos.store"):
            assert NoteStore.open(notes_path).notes == []
        assert "starting empty" in caplog.text

    def test_directory_in_place_of_document(self, notes_path: Path):
        notes_path.mkdir()
        assert NoteStore.open(notes_path).notes == []

    def test_repeated_ids_rejected(self, notes_path: Path):
        record = {"id": str(uuid.uuid4()), "title": "", "content": "", "category": ""}
        notes_path.write_text(json.dumps([record, record]), encoding="utf-8")
        assert NoteStore.open(notes_path).notes == []

    def test_null_optionals_load_as_absent(self, notes_path: Path):
        record = {
            "id": str(uuid.uuid4()),
            "title": "t",
            "content": "c",
            "category": "k",
            "imageData": None,
            "audioFileName": None,
        }
        notes_path.write_text(json.dumps([record]), encoding="utf-8")
        (note,) = NoteStore.open(notes_path).notes
        assert note.image is None
        assert note.audio_file_name is None


# ---------------------------------------------------------------------------
# Round-trip
# ---------------------------------------------------------------------------


class TestRoundTrip:
    def test_reload_equals_saved(self, three: NoteStore, notes_path: Path):
        reloaded = NoteStore.open(notes_path)
        assert reloaded.notes == three.notes

    def test_absent_audio_stays_absent(self, notes_path: Path):
        store = NoteStore.open(notes_path)
        store.add(Note.create("No audio", audio_file_name=None))
        (note,) = NoteStore.open(notes_path).notes
        assert note.audio_file_name is None

    def test_absent_fields_omitted_from_document(self, notes_path: Path):
        store = NoteStore.open(notes_path)
        store.add(Note.create("Plain"))
        (record,) = json.loads(notes_path.read_text(encoding="utf-8"))
        assert "audioFileName" not in record
        assert "imageData" not in record

    def test_empty_strings_preserved(self, notes_path: Path):
        store = NoteStore.open(notes_path)
        store.add(Note.create("", "", "", audio_file_name=""))
        (note,) = NoteStore.open(notes_path).notes
        assert note.title == ""
        assert note.audio_file_name == ""

    def test_unicode_preserved(self, notes_path: Path):
        store = NoteStore.open(notes_path)
        store.add(Note.create("Spesa", "latte è caffè ☕", "Casa"))
        assert NoteStore.open(notes_path).notes[0].content == "latte è caffè ☕"


# ---------------------------------------------------------------------------
# add()
# ---------------------------------------------------------------------------


class TestAdd:
    def test_appends_in_order(self, three: NoteStore):
        assert _titles(three) == ["First", "Second", "Third"]

    def test_persists_each_add(self, notes_path: Path):
        store = NoteStore.open(notes_path)
        store.add(Note.create("Only"))
        assert len(json.loads(notes_path.read_text(encoding="utf-8"))) == 1

    def test_duplicate_id_raises_and_leaves_state(self, three: NoteStore):
        existing = three.notes[0]
        with pytest.raises(DuplicateNoteError):
            three.add(Note(id=existing.id, title="Clash"))
        assert _titles(three) == ["First", "Second", "Third"]

    def test_contains_and_get(self, three: NoteStore):
        note = three.notes[1]
        assert note.id in three
        assert three.get(note.id) == note
        assert three.get(uuid.uuid4()) is None


# ---------------------------------------------------------------------------
# delete() / delete_at() / delete_many()
# ---------------------------------------------------------------------------


class TestDelete:
    def test_delete_by_id(self, three: NoteStore, notes_path: Path):
        three.delete(three.notes[1].id)
        assert _titles(three) == ["First", "Third"]
        assert _titles(NoteStore.open(notes_path)) == ["First", "Third"]

    def test_delete_unknown_id_is_noop(self, three: NoteStore):
        before = three.notes
        three.delete(uuid.uuid4())
        assert three.notes == before

    def test_delete_at_middle_keeps_order(self, three: NoteStore):
        three.delete_at(1)
        assert _titles(three) == ["First", "Third"]

    @pytest.mark.parametrize("position", [3, 10, -1])
    def test_delete_at_out_of_range(self, three: NoteStore, position: int):
        with pytest.raises(IndexOutOfRange):
            three.delete_at(position)
        assert _titles(three) == ["First", "Second", "Third"]

    def test_index_out_of_range_is_index_error(self, notes_path: Path):
        with pytest.raises(IndexError):
            NoteStore.open(notes_path).delete_at(0)

    def test_delete_many(self, three: NoteStore, notes_path: Path):
        three.delete_many([0, 2])
        assert _titles(three) == ["Second"]
        assert _titles(NoteStore.open(notes_path)) == ["Second"]

    def test_delete_many_validates_first(self, three: NoteStore):
        with pytest.raises(IndexOutOfRange):
            three.delete_many([0, 5])
        assert len(three) == 3

    def test_delete_keeps_audio_file(self, three: NoteStore, tmp_path: Path):
        clip = tmp_path / "A.m4a"
        clip.write_bytes(b"audio")
        three.delete_at(1)
        assert clip.exists()


# ---------------------------------------------------------------------------
# save()
# ---------------------------------------------------------------------------


class TestSave:
    def test_success_returns_none(self, three: NoteStore):
        assert three.save() is None
        assert three.last_error is None

    def test_creates_parent_directory(self, tmp_path: Path):
        store = NoteStore(tmp_path / "nested" / "dir" / "notes.json")
        store.add(Note.create("x"))
        assert store.path.exists()

    def test_write_failure_is_reported_not_raised(self, three: NoteStore, monkeypatch, caplog):
        def boom(*_args, **_kwargs):
            raise OSError(28, "No space left on device")

        monkeypatch.setattr(os, "replace", boom)
        with caplog.at_level(logging.ERROR, logger="memos.store"):
            three.add(Note.create("Fourth"))
        assert isinstance(three.last_error, PersistenceError)
        assert "Saving notes failed" in caplog.text
        assert _titles(three) == ["First", "Second", "Third", "Fourth"]

    def test_interrupted_write_keeps_previous_document(self, three: NoteStore, notes_path: Path, monkeypatch):
        before = notes_path.read_bytes()

        def boom(*_args, **_kwargs):
            raise OSError("interrupted")

        monkeypatch.setattr(os, "replace", boom)
        error = three.save()
        assert isinstance(error, PersistenceError)
        assert notes_path.read_bytes() == before
        assert _titles(NoteStore.open(notes_path)) == ["First", "Second", "Third"]

    def test_failed_write_leaves_no_temp_files(self, three: NoteStore, notes_path: Path, monkeypatch):
        def boom(*_args, **_kwargs):
            raise OSError("interrupted")

        monkeypatch.setattr(os, "fsync", boom)
        three.save()
        assert sorted(p.name for p in notes_path.parent.iterdir()) == ["notes.json"]

    def test_error_cleared_after_successful_save(self, three: NoteStore, monkeypatch):
        def boom(*_args, **_kwargs):
            raise OSError("interrupted")

        monkeypatch.setattr(os, "replace", boom)
        three.save()
        monkeypatch.undo()
        assert three.save() is None
        assert three.last_error is None

    @pytest.mark.parametrize("field", ["title", "content", "category", "audio_file_name"])
    def test_unencodable_text_is_reported_not_raised(self, three: NoteStore, notes_path: Path, field: str):
        before = notes_path.read_bytes()
        note = Note.create(**{field: "bad \ud800"})
        three.add(note)
        assert isinstance(three.last_error, PersistenceError)
        assert note.id in three
        assert notes_path.read_bytes() == before

    def test_unencodable_text_leaves_no_temp_files(self, three: NoteStore, notes_path: Path):
        three.add(Note.create("bad \ud800"))
        assert sorted(p.name for p in notes_path.parent.iterdir()) == ["notes.json"]


@pytest.mark.skipif(os.name != "posix", reason="POSIX permission bits")
class TestFileMode:
    def test_existing_mode_preserved(self, three: NoteStore, notes_path: Path):
        notes_path.chmod(0o640)
        three.add(Note.create("Fourth"))
        assert notes_path.stat().st_mode & 0o777 == 0o640

    def test_new_document_follows_umask(self, notes_path: Path):
        umask = os.umask(0o022)
        try:
            NoteStore(notes_path).add(Note.create("First"))
        finally:
            os.umask(umask)
        assert notes_path.stat().st_mode & 0o777 == 0o644
