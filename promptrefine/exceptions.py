from __future__ import annotations


class RefinementError(Exception):
    """Base class for errors raised by the refinement pipeline."""


class ValidationError(RefinementError):
    """Raised when a request carries no usable input at all."""


class OcrUnavailableError(RefinementError):
    """Raised by an OCR session that cannot recognize text."""


__all__ = ["OcrUnavailableError", "RefinementError", "ValidationError"]
