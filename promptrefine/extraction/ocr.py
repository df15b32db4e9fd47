"""Optical character recognition sessions."""

from __future__ import annotations

from pathlib import Path
from types import TracebackType
from typing import Protocol

from PIL import Image
from pytesseract import (
    Output,
    TesseractError,
    TesseractNotFoundError,
    get_tesseract_version,
    image_to_data,
    image_to_string,
)

from promptrefine.exceptions import OcrUnavailableError


class OcrSession(Protocol):
    def recognize(self, path: Path) -> tuple[str, float]:
        """Return recognized text and a confidence in ``[0, 1]``."""


class TesseractSession:
    """A recognition session bound to one language.

    Used as a context manager; the engine is checked once on entry and the
    session refuses work after exit.
    """

    def __init__(self, language: str = "eng") -> None:
        self.language = language
        self.available = False
        self._open = False

    def __enter__(self) -> TesseractSession:
        try:
            get_tesseract_version()
        except TesseractNotFoundError:
            self.available = False
        else:
            self.available = True
        self._open = True
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        self._open = False

    def recognize(self, path: Path) -> tuple[str, float]:
        if not self._open:
            msg = "OCR session is closed"
            raise OcrUnavailableError(msg)
        if not self.available:
            msg = "tesseract is not installed"
            raise OcrUnavailableError(msg)
        try:
            with Image.open(path) as image:
                text = image_to_string(image, lang=self.language)
                data = image_to_data(image, lang=self.language, output_type=Output.DICT)
        except TesseractError as error:
            raise OcrUnavailableError(str(error)) from error
        return text.strip(), _mean_confidence(data.get("conf", []))


class UnavailableOcrSession:
    """Stands in for a session that could not be opened; every call fails."""

    def __init__(self, reason: str) -> None:
        self.reason = reason

    def recognize(self, path: Path) -> tuple[str, float]:
        raise OcrUnavailableError(self.reason)


def _mean_confidence(values: list) -> float:
    scores = []
    for value in values:
        try:
            score = float(value)
        except (TypeError, ValueError):
            continue
        if score >= 0:
            scores.append(score)
    if not scores:
        return 0.0
    return round(sum(scores) / len(scores) / 100, 4)


__all__ = ["OcrSession", "TesseractSession", "UnavailableOcrSession"]
