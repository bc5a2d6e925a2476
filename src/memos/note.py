"""Core Note dataclass."""

from __future__ import annotations

import base64
import uuid
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class Note:
    """A single user note with optional image and voice recording."""

    id: uuid.UUID
    title: str = ""
    content: str = ""
    category: str = ""
    #: Encoded raster image stored inline in the record
    image: bytes | None = None
    #: Name of the audio side file; resolved against the audio directory
    audio_file_name: str | None = None

    @classmethod
    def create(
        cls,
        title: str = "",
        content: str = "",
        category: str = "",
        *,
        image: bytes | None = None,
        audio_file_name: str | None = None,
    ) -> "Note":
        """Build a new note with a freshly minted id."""
        return cls(
            id=uuid.uuid4(),
            title=title,
            content=content,
            category=category,
            image=image,
            audio_file_name=audio_file_name,
        )

    @property
    def has_image(self) -> bool:
        return self.image is not None

    @property
    def has_audio(self) -> bool:
        return self.audio_file_name is not None

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-ready record; absent optionals are omitted."""
        record: dict[str, Any] = {
            "id": str(self.id),
            "title": self.title,
            "content": self.content,
            "category": self.category,
        }
        if self.image is not None:
            record["imageData"] = base64.b64encode(self.image).decode("ascii")
        if self.audio_file_name is not None:
            record["audioFileName"] = self.audio_file_name
        return record

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Note":
        """Inverse of :meth:`to_dict`; ``null`` optionals load as absent.

        Raises ``KeyError``, ``ValueError`` or ``TypeError`` on malformed
        records.
        """
        image_data = data.get("imageData")
        audio = data.get("audioFileName")
        if audio is not None and not isinstance(audio, str):
            raise TypeError(f"audioFileName must be a string, got {type(audio).__name__}")
        return cls(
            id=uuid.UUID(_text(data, "id")),
            title=_text(data, "title"),
            content=_text(data, "content"),
            category=_text(data, "category"),
            image=base64.b64decode(image_data, validate=True) if image_data is not None else None,
            audio_file_name=audio,
        )


def _text(data: dict[str, Any], key: str) -> str:
    value = data[key]
    if not isinstance(value, str):
        raise TypeError(f"{key} must be a string, got {type(value).__name__}")
    return value
