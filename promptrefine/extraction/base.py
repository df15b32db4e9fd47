from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, ClassVar

from promptrefine.extraction.reports import failure_report
from promptrefine.extraction.types import ExtractionResult, FileKind, FileRef
from promptrefine.utils.files import format_file_size


class FormatExtractor(ABC):
    """Turn one stored file into an :class:`ExtractionResult`.

    ``extract`` never raises: whatever the variant's ``_extract`` throws is
    converted by ``_failure`` into an unsuccessful result that still carries
    readable text.
    """

    kind: ClassVar[FileKind]

    def extract(self, file_ref: FileRef) -> ExtractionResult:
        try:
            return self._extract(file_ref)
        except Exception as error:  # noqa: BLE001
            return self._failure(file_ref, error)

    @abstractmethod
    def _extract(self, file_ref: FileRef) -> ExtractionResult:
        """Extract text from the file; may raise."""

    def _failure(self, file_ref: FileRef, error: Exception) -> ExtractionResult:
        message = str(error) or error.__class__.__name__
        return ExtractionResult(
            success=False,
            text=failure_report(file_ref, message),
            metadata=self._base_metadata(file_ref) | {"extraction_method": "error", "error": message},
            error=message,
        )

    def _base_metadata(self, file_ref: FileRef) -> dict[str, Any]:
        return {
            "file_name": file_ref.original_name,
            "file_size": file_ref.size_bytes,
            "formatted_size": format_file_size(file_ref.size_bytes),
        }


__all__ = ["FormatExtractor"]
