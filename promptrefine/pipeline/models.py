from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from promptrefine.extraction.types import FileRef
from promptrefine.synthesis.styles import Style


@dataclass(slots=True, frozen=True)
class InputBundle:
    """Raw material of one refinement request."""

    text: str | None = None
    files: tuple[FileRef, ...] = ()

    @property
    def has_text(self) -> bool:
        return bool(self.text and self.text.strip())

    @property
    def is_empty(self) -> bool:
        return not self.has_text and not self.files


@dataclass(slots=True, frozen=True)
class ExtractedEntry:
    """One categorized item of extracted content."""

    filename: str | None
    kind: str
    content: str = ""
    summary: str | None = None
    word_count: int | None = None
    topics: tuple[str, ...] = ()
    structure: dict[str, Any] = field(default_factory=dict)
    metadata: dict[str, Any] = field(default_factory=dict)
    extraction_success: bool = True
    error: str | None = None
    mime_type: str | None = None

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "filename": self.filename,
            "kind": self.kind,
            "content": self.content,
            "extraction_success": self.extraction_success,
        }
        if self.summary is not None:
            payload["summary"] = self.summary
        if self.word_count is not None:
            payload["word_count"] = self.word_count
        if self.topics:
            payload["topics"] = list(self.topics)
        if self.structure:
            payload["structure"] = self.structure
        if self.metadata:
            payload["metadata"] = self.metadata
        if self.error is not None:
            payload["error"] = self.error
        if self.mime_type is not None:
            payload["mime_type"] = self.mime_type
        return payload


@dataclass(slots=True, frozen=True)
class ExtractedContent:
    text: tuple[ExtractedEntry, ...] = ()
    images: tuple[ExtractedEntry, ...] = ()
    documents: tuple[ExtractedEntry, ...] = ()

    def content_types(self) -> list[str]:
        """Names of the non-empty buckets, in a fixed order."""

        buckets = (("text", self.text), ("images", self.images), ("documents", self.documents))
        return [name for name, entries in buckets if entries]

    def to_dict(self) -> dict[str, list[dict[str, Any]]]:
        return {
            "text": [entry.to_dict() for entry in self.text],
            "images": [entry.to_dict() for entry in self.images],
            "documents": [entry.to_dict() for entry in self.documents],
        }


@dataclass(slots=True, frozen=True)
class SynthesisRequest:
    text_content: str
    file_narrative: str
    extracted_content: ExtractedContent
    style: Style
    max_length: int
    temperature: float
    input_text: str | None = None
    files: tuple[FileRef, ...] = ()


@dataclass(slots=True, frozen=True)
class RefinedPromptResult:
    """Terminal artifact of a refinement request."""

    id: str
    refined_prompt: str
    style: str
    metadata: dict[str, Any]
    extracted_content: ExtractedContent
    assumptions: tuple[str, ...]
    timestamp: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "refined_prompt": self.refined_prompt,
            "style": self.style,
            "metadata": self.metadata,
            "extracted_content": self.extracted_content.to_dict(),
            "assumptions": list(self.assumptions),
            "timestamp": self.timestamp,
        }


__all__ = [
    "ExtractedContent",
    "ExtractedEntry",
    "InputBundle",
    "RefinedPromptResult",
    "SynthesisRequest",
]
