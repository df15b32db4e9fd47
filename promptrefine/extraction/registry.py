from __future__ import annotations

from pathlib import Path

from promptrefine.extraction.base import FormatExtractor
from promptrefine.extraction.image import ImageExtractor
from promptrefine.extraction.ocr import OcrSession
from promptrefine.extraction.pdf import PdfExtractor
from promptrefine.extraction.text import PlainTextExtractor
from promptrefine.extraction.types import FileKind
from promptrefine.extraction.word import WordExtractor


def build_registry(
    ocr: OcrSession | None = None,
    scratch_dir: Path | None = None,
    preprocess: bool = True,
) -> dict[FileKind, FormatExtractor]:
    """Map every extractable kind to its extractor.

    The image variant is only registered when an OCR session is supplied;
    without a scratch directory it runs without preprocessing.
    """

    registry: dict[FileKind, FormatExtractor] = {
        FileKind.TEXT: PlainTextExtractor(),
        FileKind.PDF: PdfExtractor(),
        FileKind.WORD: WordExtractor(),
    }
    if ocr is not None:
        registry[FileKind.IMAGE] = ImageExtractor(ocr, scratch_dir, preprocess=preprocess)
    return registry


__all__ = ["build_registry"]
