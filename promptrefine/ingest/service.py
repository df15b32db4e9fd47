from __future__ import annotations

from collections.abc import Callable, Sequence
from contextlib import AbstractContextManager, ExitStack
from dataclasses import dataclass
from pathlib import Path
from tempfile import TemporaryDirectory

from promptrefine.analysis.analyzer import analyze_text
from promptrefine.analysis.structure import analyze_structure
from promptrefine.config import Settings, settings
from promptrefine.extraction.base import FormatExtractor
from promptrefine.extraction.ocr import OcrSession, TesseractSession, UnavailableOcrSession
from promptrefine.extraction.registry import build_registry
from promptrefine.extraction.types import ExtractionResult, FileCategory, FileKind, FileRef
from promptrefine.ingest.detector import Detection, FileDetector
from promptrefine.pipeline.models import ExtractedContent, ExtractedEntry
from promptrefine.synthesis.styles import Style, file_guidance
from promptrefine.utils.audit import AuditTrail

NARRATIVE_HEADER = "## UPLOADED FILES ANALYSIS"
SUMMARY_EXCERPT = 150
CONTENT_EXCERPT = 500
ERROR_EXCERPT = 50
MAX_TOPICS_SHOWN = 5

OcrFactory = Callable[[], AbstractContextManager[OcrSession]]


@dataclass(slots=True, frozen=True)
class IngestionOutcome:
    narrative: str
    extracted_content: ExtractedContent


@dataclass(slots=True)
class _Buckets:
    text: list[ExtractedEntry]
    images: list[ExtractedEntry]
    documents: list[ExtractedEntry]

    def freeze(self) -> ExtractedContent:
        return ExtractedContent(
            text=tuple(self.text),
            images=tuple(self.images),
            documents=tuple(self.documents),
        )


class IngestionCoordinator:
    """Run every uploaded file through detection, extraction and analysis.

    Files are handled one after another in input order. When the batch holds
    at least one image an OCR session and a scratch directory are opened for
    the whole batch and released when it ends, whatever happens. A session
    that cannot be opened leaves every image with the OCR placeholder.
    """

    def __init__(
        self,
        config: Settings = settings,
        detector: FileDetector | None = None,
        ocr_factory: OcrFactory | None = None,
    ) -> None:
        self.config = config
        self.detector = detector or FileDetector()
        self.ocr_factory = ocr_factory or (lambda: TesseractSession(config.ocr_language))

    def ingest(
        self,
        files: Sequence[FileRef],
        style: Style | str,
        audit: AuditTrail | None = None,
    ) -> IngestionOutcome:
        """Build the narrative block and the categorized content for ``files``."""

        style = Style.parse(style) if isinstance(style, str) else style
        audit = audit or AuditTrail()
        detections = [self._safe_detect(file_ref) for file_ref in files]
        buckets = _Buckets(text=[], images=[], documents=[])
        sections = [NARRATIVE_HEADER, ""]

        with ExitStack() as stack:
            registry = self._open_registry(stack, detections, audit)
            for index, (file_ref, detection) in enumerate(zip(files, detections), start=1):
                lines = _file_header(index, file_ref)
                try:
                    if detection is None:
                        msg = "file type could not be determined"
                        raise ValueError(msg)
                    audit.record(
                        "info",
                        "ingest.file",
                        name=file_ref.original_name,
                        kind=detection.kind.value,
                        mime=detection.mime,
                        size=file_ref.size_bytes,
                    )
                    lines += self._process(file_ref, detection, registry, buckets, audit)
                except Exception as error:  # noqa: BLE001
                    audit.record(
                        "error",
                        "ingest.file_failed",
                        name=file_ref.original_name,
                        error=str(error),
                    )
                    lines += [
                        "- **Status:** Processing error",
                        f"- **Error:** {str(error)[:ERROR_EXCERPT]}",
                        "- **Fallback:** File included as context reference",
                    ]
                category = detection.category if detection else FileCategory.OTHER
                sections += [*lines, "", file_guidance(category, style), ""]

        return IngestionOutcome(narrative="\n".join(sections), extracted_content=buckets.freeze())

    def _safe_detect(self, file_ref: FileRef) -> Detection | None:
        try:
            return self.detector.detect(file_ref)
        except (OSError, ValueError):
            return None

    def _open_registry(
        self,
        stack: ExitStack,
        detections: Sequence[Detection | None],
        audit: AuditTrail,
    ) -> dict[FileKind, FormatExtractor]:
        if not any(d is not None and d.kind is FileKind.IMAGE for d in detections):
            return build_registry()
        try:
            ocr: OcrSession = stack.enter_context(self.ocr_factory())
        except Exception as error:  # noqa: BLE001
            reason = str(error) or error.__class__.__name__
            audit.record("error", "ocr.session_failed", error=reason)
            return build_registry(ocr=UnavailableOcrSession(reason))
        try:
            scratch = stack.enter_context(TemporaryDirectory(prefix="promptrefine-ocr-"))
        except OSError as error:
            audit.record("warning", "ocr.scratch_failed", error=str(error))
            return build_registry(ocr=ocr)
        return build_registry(ocr=ocr, scratch_dir=Path(scratch), preprocess=self.config.ocr_preprocess)

    def _process(
        self,
        file_ref: FileRef,
        detection: Detection,
        registry: dict[FileKind, FormatExtractor],
        buckets: _Buckets,
        audit: AuditTrail,
    ) -> list[str]:
        extractor = registry.get(detection.kind)
        if extractor is None:
            buckets.text.append(
                ExtractedEntry(
                    filename=file_ref.original_name,
                    kind="unsupported",
                    content="Limited extraction available",
                    mime_type=detection.mime,
                )
            )
            return [
                "- **Content:** Unsupported file type for detailed extraction",
                "- **Note:** File included but content extraction limited",
            ]

        result = extractor.extract(file_ref)
        if not result.success:
            audit.record(
                "warning",
                "extract.failed",
                name=file_ref.original_name,
                kind=detection.kind.value,
                error=result.error,
            )
        if detection.kind is FileKind.IMAGE:
            return self._image_section(file_ref, detection, result, buckets)
        return self._document_section(file_ref, detection, result, buckets)

    def _image_section(
        self,
        file_ref: FileRef,
        detection: Detection,
        result: ExtractionResult,
        buckets: _Buckets,
    ) -> list[str]:
        metadata = result.metadata
        lines = [
            "- **Content:** Image analysis available",
            f"- **Format:** {metadata.get('format') or 'Unknown'}",
            f"- **Dimensions:** {metadata.get('width') or '?'}x{metadata.get('height') or '?'}",
            f"- **OCR Confidence:** {float(metadata.get('confidence', 0.0)):.0%}",
        ]
        entry_kwargs = {
            "filename": file_ref.original_name,
            "kind": "image",
            "content": result.text,
            "metadata": metadata,
            "extraction_success": result.success,
            "error": result.error,
            "mime_type": detection.mime,
        }
        if result.success and result.text:
            analysis = analyze_text(result.text)
            lines += [
                "- **Extraction:** Successful",
                f"- **Recognized Text:** {_excerpt(result.text, SUMMARY_EXCERPT)}",
                f"- **Word Count:** {analysis.word_count}",
            ]
            entry_kwargs |= {"summary": analysis.summary, "word_count": analysis.word_count}
        elif result.success:
            lines.append("- **Extraction:** No text recognized")
        else:
            lines += [
                "- **Extraction:** Failed",
                f"- **Error:** {result.error or 'Unknown error'}",
                "- **Note:** Placeholder text used, image included as visual context",
            ]
        buckets.images.append(ExtractedEntry(**entry_kwargs))
        return lines

    def _document_section(
        self,
        file_ref: FileRef,
        detection: Detection,
        result: ExtractionResult,
        buckets: _Buckets,
    ) -> list[str]:
        lines = ["- **Content Type:** Document/text"]
        if not result.success:
            lines += [
                "- **Extraction:** Failed",
                f"- **Error:** {result.error or 'Unknown error'}",
                "- **Note:** File included as context reference",
            ]
            buckets.documents.append(
                ExtractedEntry(
                    filename=file_ref.original_name,
                    kind="document",
                    content=result.text or "No content extracted",
                    metadata=result.metadata,
                    extraction_success=False,
                    error=result.error or "Extraction failed",
                    mime_type=detection.mime,
                )
            )
            return lines

        analysis = analyze_text(result.text)
        lines += [
            "- **Extraction:** Successful",
            f"- **Summary:** {_excerpt(analysis.summary, SUMMARY_EXCERPT)}",
            f"- **Word Count:** {analysis.word_count}",
            f"- **Key Topics:** {', '.join(analysis.topics[:MAX_TOPICS_SHOWN])}",
        ]
        if analysis.has_headings:
            lines.append("- **Structure:** Contains headings")
        if analysis.has_lists:
            lines.append("- **Format:** Includes lists")
        if analysis.has_references:
            lines.append("- **References:** Contains citations")

        buckets.documents.append(
            ExtractedEntry(
                filename=file_ref.original_name,
                kind="document",
                content=_excerpt(result.text, CONTENT_EXCERPT),
                summary=analysis.summary,
                word_count=analysis.word_count,
                topics=analysis.topics,
                structure=analyze_structure(result.text).to_dict(),
                metadata=result.metadata,
                extraction_success=True,
                mime_type=detection.mime,
            )
        )
        return lines


def _file_header(index: int, file_ref: FileRef) -> list[str]:
    size_mb = file_ref.size_bytes / (1024 * 1024)
    return [
        f"### File {index}: {file_ref.original_name}",
        f"- **Type:** {file_ref.declared_mime}",
        f"- **Size:** {size_mb:.2f} MB",
        f"- **Extension:** {file_ref.extension or 'N/A'}",
    ]


def _excerpt(text: str, limit: int) -> str:
    return text[:limit] + ("..." if len(text) > limit else "")


__all__ = ["IngestionCoordinator", "IngestionOutcome", "NARRATIVE_HEADER"]
