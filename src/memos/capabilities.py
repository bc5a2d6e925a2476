"""Protocols for the platform capabilities the notes core talks to.

Recording, playback and image picking live outside this package; any object
satisfying these protocols can be handed to :class:`memos.audio.AudioLibrary`
or a presentation layer without changing call sites.
"""

from __future__ import annotations

from pathlib import Path
from typing import Protocol, runtime_checkable


@runtime_checkable
class AudioRecorder(Protocol):
    def start_recording(self, path: Path) -> None:
        """Begin capturing audio into *path*."""
        ...

    def stop_recording(self) -> None:
        """Finish the current capture and close the file."""
        ...


@runtime_checkable
class AudioPlayer(Protocol):
    def play(self, path: Path) -> None:
        """Start playing the clip at *path*."""
        ...

    def stop(self) -> None:
        ...


@runtime_checkable
class ImagePicker(Protocol):
    def pick_image(self) -> bytes | None:
        """Return an encoded image, or ``None`` when the user cancels."""
        ...
