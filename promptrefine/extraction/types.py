from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

from promptrefine.utils.files import guess_mimetype


class FileKind(str, Enum):
    """Extraction variant selected for an uploaded file."""

    TEXT = "text"
    PDF = "pdf"
    WORD = "word"
    IMAGE = "image"
    UNSUPPORTED = "unsupported"


class FileCategory(str, Enum):
    """Bucket a file is reported under."""

    IMAGE = "image"
    DOCUMENT = "document"
    OTHER = "other"


@dataclass(slots=True, frozen=True)
class FileRef:
    """Handle on a staged upload, owned by the upload collaborator."""

    original_name: str
    stored_path: Path
    declared_mime: str
    size_bytes: int

    @property
    def extension(self) -> str:
        return Path(self.original_name).suffix.lower()

    @classmethod
    def from_path(cls, path: Path, mime: str | None = None) -> FileRef:
        """Describe a file already on disk."""

        return cls(
            original_name=path.name,
            stored_path=path,
            declared_mime=mime or guess_mimetype(path),
            size_bytes=path.stat().st_size,
        )


@dataclass(slots=True, frozen=True)
class ExtractionResult:
    """Structured output from an extractor.

    A failed extraction still carries a readable fallback ``text``.
    """

    success: bool
    text: str
    metadata: dict[str, Any] = field(default_factory=dict)
    error: str | None = None


__all__ = ["ExtractionResult", "FileCategory", "FileKind", "FileRef"]
