from __future__ import annotations

from pathlib import Path
from typing import Any

import exifread
from imagehash import phash
from PIL import Image, ImageEnhance, ImageOps, UnidentifiedImageError

from promptrefine.exceptions import OcrUnavailableError
from promptrefine.extraction.base import FormatExtractor
from promptrefine.extraction.ocr import OcrSession
from promptrefine.extraction.reports import image_placeholder
from promptrefine.extraction.types import ExtractionResult, FileKind, FileRef

PLACEHOLDER_CONFIDENCE = 0.75
CONTRAST_FACTOR = 1.5


class ImageExtractor(FormatExtractor):
    """Recognize text in an image, with EXIF metadata and a perceptual hash.

    Every failure, whether OCR is missing or the file cannot be read, ends in
    the labelled placeholder text. Preprocessing needs a scratch directory
    and is skipped without one.
    """

    kind = FileKind.IMAGE

    def __init__(self, ocr: OcrSession, scratch_dir: Path | None = None, preprocess: bool = True) -> None:
        self.ocr = ocr
        self.scratch_dir = scratch_dir
        self.preprocess = preprocess

    def _extract(self, file_ref: FileRef) -> ExtractionResult:
        metadata = self._base_metadata(file_ref)
        metadata.update(_describe_image(file_ref.stored_path))

        source = file_ref.stored_path
        metadata["preprocessed"] = False
        if self.preprocess and self.scratch_dir is not None:
            prepared = self._prepare(file_ref.stored_path, self.scratch_dir)
            if prepared is not None:
                source = prepared
                metadata["preprocessed"] = True

        try:
            text, confidence = self.ocr.recognize(source)
        except OcrUnavailableError as error:
            return self._placeholder(file_ref, metadata, str(error))

        metadata |= {
            "text_length": len(text),
            "has_text": bool(text),
            "extraction_method": "ocr",
            "confidence": confidence,
        }
        return ExtractionResult(success=True, text=text, metadata=metadata)

    def _failure(self, file_ref: FileRef, error: Exception) -> ExtractionResult:
        message = str(error) or error.__class__.__name__
        return self._placeholder(file_ref, self._base_metadata(file_ref), message)

    def _placeholder(self, file_ref: FileRef, metadata: dict[str, Any], message: str) -> ExtractionResult:
        placeholder = image_placeholder(file_ref)
        metadata = metadata | {
            "text_length": len(placeholder),
            "has_text": False,
            "extraction_method": "placeholder",
            "confidence": PLACEHOLDER_CONFIDENCE,
            "error": message,
        }
        return ExtractionResult(success=False, text=placeholder, metadata=metadata, error=message)

    def _prepare(self, path: Path, scratch_dir: Path) -> Path | None:
        target = scratch_dir / f"prepared-{path.stem}.png"
        try:
            with Image.open(path) as image:
                prepared = ImageOps.grayscale(image)
                prepared = ImageEnhance.Contrast(prepared).enhance(CONTRAST_FACTOR)
                prepared = ImageOps.autocontrast(prepared)
                prepared.save(target, format="PNG")
        except (UnidentifiedImageError, OSError, ValueError):
            return None
        return target


def _describe_image(path: Path) -> dict[str, Any]:
    metadata: dict[str, Any] = {"exif": _collect_exif(path)}
    try:
        with Image.open(path) as image:
            metadata["width"], metadata["height"] = image.size
            metadata["format"] = image.format
            metadata["mode"] = image.mode
            metadata["phash"] = str(phash(image))
    except (UnidentifiedImageError, OSError, ValueError):
        metadata.setdefault("format", None)
    return metadata


def _collect_exif(path: Path) -> dict[str, str]:
    with path.open("rb") as stream:
        tags = exifread.process_file(stream, details=False)
    return {key: str(value) for key, value in tags.items()}


__all__ = ["ImageExtractor"]
