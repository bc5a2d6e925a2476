"""AudioLibrary: voice clips stored as side files next to the notes document.

A note holds only the clip's file name. Resolving it to a playable file means
joining that name with the audio directory at read time. Deleting a note does
not delete its clip; :meth:`AudioLibrary.orphans` reports what was left
behind and :meth:`AudioLibrary.dangling` reports notes whose clip is gone.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Iterable
from pathlib import Path
from typing import TYPE_CHECKING

from memos.exceptions import DanglingAudioReference

if TYPE_CHECKING:
    from memos.capabilities import AudioPlayer, AudioRecorder
    from memos.note import Note

logger = logging.getLogger(__name__)

DEFAULT_EXTENSION = "m4a"
AUDIO_EXTENSIONS = frozenset({"m4a", "aac", "wav", "mp3", "caf", "ogg"})


class AudioLibrary:
    """Names, resolves and audits audio clips in a single directory."""

    def __init__(self, audio_dir: Path | str) -> None:
        self.audio_dir = Path(audio_dir)

    # ------------------------------------------------------------------
    # Naming / resolution
    # ------------------------------------------------------------------

    @staticmethod
    def new_clip_name(extension: str = DEFAULT_EXTENSION) -> str:
        """Return a fresh ``<uuid>.<extension>`` file name."""
        return f"{str(uuid.uuid4()).upper()}.{extension.lstrip('.')}"

    def resolve(self, file_name: str) -> Path:
        """Join *file_name* with the audio directory.

        Only bare names are accepted; anything with a directory component
        raises ``ValueError``.
        """
        if not file_name or Path(file_name).name != file_name or file_name in {".", ".."}:
            raise ValueError(f"not a bare audio file name: {file_name!r}")
        return self.audio_dir / file_name

    def exists(self, file_name: str) -> bool:
        try:
            return self.resolve(file_name).is_file()
        except ValueError:
            return False

    # ------------------------------------------------------------------
    # Recording / playback
    # ------------------------------------------------------------------

    def record(self, recorder: "AudioRecorder", extension: str = DEFAULT_EXTENSION) -> str:
        """Start *recorder* on a fresh clip and return the clip's file name.

        The caller stops the recorder and stores the name on the new note.
        """
        name = self.new_clip_name(extension)
        self.audio_dir.mkdir(parents=True, exist_ok=True)
        recorder.start_recording(self.resolve(name))
        return name

    def play(self, file_name: str, player: "AudioPlayer") -> bool:
        """Hand the clip to *player*; a missing clip is logged and skipped.

        Returns ``True`` when playback was started.
        """
        if not self.exists(file_name):
            logger.warning("Cannot play audio: %s", DanglingAudioReference(file_name))
            return False
        player.play(self.resolve(file_name))
        return True

    # ------------------------------------------------------------------
    # Audits
    # ------------------------------------------------------------------

    def dangling(self, notes: Iterable["Note"]) -> list["Note"]:
        """Notes whose ``audio_file_name`` does not resolve to an existing file."""
        return [
            n for n in notes if n.audio_file_name is not None and not self.exists(n.audio_file_name)
        ]

    def orphans(self, notes: Iterable["Note"]) -> list[Path]:
        """Clip files in the audio directory that no note references."""
        if not self.audio_dir.is_dir():
            return []
        referenced = {n.audio_file_name for n in notes if n.audio_file_name is not None}
        return sorted(
            path
            for path in self.audio_dir.iterdir()
            if path.is_file()
            and path.suffix.lstrip(".").lower() in AUDIO_EXTENSIONS
            and path.name not in referenced
        )
