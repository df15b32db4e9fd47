from __future__ import annotations

import re

from promptrefine.extraction.base import FormatExtractor
from promptrefine.extraction.types import ExtractionResult, FileKind, FileRef

_LINE_ENDING_RE = re.compile(r"\r\n?")
_BLANK_RUN_RE = re.compile(r"\n{3,}")
_HORIZONTAL_RUN_RE = re.compile(r"[ \t]+")


def clean_text(text: str) -> str:
    """Normalize line endings and collapse blank-line and horizontal whitespace runs."""

    if not text:
        return ""
    normalized = _LINE_ENDING_RE.sub("\n", text)
    normalized = _BLANK_RUN_RE.sub("\n\n", normalized)
    normalized = _HORIZONTAL_RUN_RE.sub(" ", normalized)
    return normalized.strip()


class PlainTextExtractor(FormatExtractor):
    """Extract plain text content from text and markdown files."""

    kind = FileKind.TEXT

    def _extract(self, file_ref: FileRef) -> ExtractionResult:
        raw = file_ref.stored_path.read_bytes()
        content = clean_text(raw.decode("utf-8", errors="replace"))
        metadata = self._base_metadata(file_ref) | {
            "text_length": len(content),
            "has_text": bool(content),
            "extraction_method": "text",
        }
        return ExtractionResult(success=True, text=content, metadata=metadata)


__all__ = ["PlainTextExtractor", "clean_text"]
