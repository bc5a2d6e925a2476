"""Installation settings: where the notes document and audio clips live.

Environment variables (all optional; direct kwargs take precedence):
    MEMOS_DATA_DIR     – data directory (default: ``~/.memos``)
    MEMOS_NOTES_FILE   – notes document file name (default: ``notes.json``)
    MEMOS_AUDIO_DIR    – audio clip directory (default: the data directory)
    MEMOS_LOG_LEVEL    – level used by :func:`memos.configure_logging`
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

DEFAULT_DATA_DIR = Path("~/.memos")
DEFAULT_NOTES_FILE = "notes.json"
DEFAULT_LOG_LEVEL = "WARNING"


@dataclass(frozen=True)
class Settings:
    data_dir: Path
    notes_file: str = DEFAULT_NOTES_FILE
    audio_dir_override: Path | None = None
    log_level: str = DEFAULT_LOG_LEVEL

    @classmethod
    def from_env(
        cls,
        data_dir: Path | str | None = None,
        *,
        notes_file: str | None = None,
        audio_dir: Path | str | None = None,
        log_level: str | None = None,
    ) -> "Settings":
        raw_dir = data_dir or os.getenv("MEMOS_DATA_DIR") or DEFAULT_DATA_DIR
        raw_audio = audio_dir or os.getenv("MEMOS_AUDIO_DIR")
        return cls(
            data_dir=Path(raw_dir).expanduser(),
            notes_file=notes_file or os.getenv("MEMOS_NOTES_FILE", DEFAULT_NOTES_FILE),
            audio_dir_override=Path(raw_audio).expanduser() if raw_audio else None,
            log_level=(log_level or os.getenv("MEMOS_LOG_LEVEL", DEFAULT_LOG_LEVEL)).upper(),
        )

    @property
    def notes_path(self) -> Path:
        return self.data_dir / self.notes_file

    @property
    def audio_dir(self) -> Path:
        return self.audio_dir_override or self.data_dir
