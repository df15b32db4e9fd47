from __future__ import annotations

from docx import Document

from promptrefine.extraction.base import FormatExtractor
from promptrefine.extraction.reports import word_fallback_report
from promptrefine.extraction.text import clean_text
from promptrefine.extraction.types import ExtractionResult, FileKind, FileRef


class WordExtractor(FormatExtractor):
    """Read the raw text of a word-processing document, tables included."""

    kind = FileKind.WORD

    def _extract(self, file_ref: FileRef) -> ExtractionResult:
        document = Document(str(file_ref.stored_path))
        blocks = [paragraph.text for paragraph in document.paragraphs]
        for table in document.tables:
            for row in table.rows:
                blocks.append(" | ".join(cell.text.strip() for cell in row.cells))
        content = clean_text("\n".join(blocks))
        metadata = self._base_metadata(file_ref) | {
            "text_length": len(content),
            "has_text": bool(content),
            "extraction_method": "docx",
            "paragraph_total": len(document.paragraphs),
            "table_total": len(document.tables),
        }
        return ExtractionResult(success=True, text=content, metadata=metadata)

    def _failure(self, file_ref: FileRef, error: Exception) -> ExtractionResult:
        message = str(error) or error.__class__.__name__
        report = word_fallback_report(file_ref, message)
        metadata = self._base_metadata(file_ref) | {
            "text_length": len(report),
            "has_text": False,
            "extraction_method": "none",
            "error": message,
        }
        return ExtractionResult(success=False, text=report, metadata=metadata, error=message)


__all__ = ["WordExtractor"]
