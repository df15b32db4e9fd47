from __future__ import annotations

from dataclasses import dataclass

import filetype

from promptrefine.extraction.types import FileCategory, FileKind, FileRef

_DOCUMENT_MARKERS = ("pdf", "document", "text", "msword")
_GENERIC_MIMES = {"", "application/octet-stream"}
_WORD_MARKERS = ("msword", "wordprocessingml")


@dataclass(slots=True, frozen=True)
class Detection:
    category: FileCategory
    kind: FileKind
    mime: str


class FileDetector:
    """Determine the category and extraction kind of an upload from its MIME type."""

    def detect(self, file_ref: FileRef) -> Detection:
        """Return the reporting category, extractor kind and effective mime type."""

        mime = (file_ref.declared_mime or "").lower()
        if mime in _GENERIC_MIMES:
            mime = self._sniff(file_ref) or mime
        category = self.categorize(mime)
        return Detection(category=category, kind=self._map_kind(category, mime), mime=mime)

    @staticmethod
    def categorize(mime: str) -> FileCategory:
        lowered = mime.lower()
        if lowered.startswith("image/"):
            return FileCategory.IMAGE
        if any(marker in lowered for marker in _DOCUMENT_MARKERS):
            return FileCategory.DOCUMENT
        return FileCategory.OTHER

    def _sniff(self, file_ref: FileRef) -> str | None:
        try:
            kind = filetype.guess(str(file_ref.stored_path))
        except OSError:
            return None
        return kind.mime if kind else None

    @staticmethod
    def _map_kind(category: FileCategory, mime: str) -> FileKind:
        # decided by MIME type alone
        if category is FileCategory.IMAGE:
            return FileKind.IMAGE
        if category is FileCategory.OTHER:
            return FileKind.UNSUPPORTED
        if "pdf" in mime:
            return FileKind.PDF
        if any(marker in mime for marker in _WORD_MARKERS):
            return FileKind.WORD
        return FileKind.TEXT


__all__ = ["Detection", "FileDetector"]
