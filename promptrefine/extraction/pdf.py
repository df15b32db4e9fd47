from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from pdfminer.pdfdocument import PDFDocument
from pdfminer.pdfpage import PDFPage
from pdfminer.pdfparser import PDFParser
from pdfminer.psparser import PSException

from promptrefine.analysis.scoring import confidence_for_word_count
from promptrefine.analysis.structure import (
    content_flags,
    count_paragraphs,
    count_sentences,
    count_words,
)
from promptrefine.analysis.topics import guess_document_type
from promptrefine.extraction.base import FormatExtractor
from promptrefine.extraction.reports import pdf_error_report, pdf_extraction_report
from promptrefine.extraction.types import ExtractionResult, FileKind, FileRef

HEADER_SAMPLE_SIZE = 50_000
DIRECT_TEXT_MIN_WORDS = 200
REPORT_SUCCESS_MIN_WORDS = 10

_LITERAL_RE = re.compile(r"\(([^)]+)\)")
_VERSION_RE = re.compile(r"%PDF-(\d\.\d)")

_ARTIFACT_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"\d+\s+\d+\s+obj\b", re.IGNORECASE),
    re.compile(r"\bendobj\b", re.IGNORECASE),
    re.compile(r"\b(?:end)?stream\b", re.IGNORECASE),
    re.compile(r"\b(?:BT|ET)\b"),
    re.compile(r"/[A-Z][a-zA-Z]+\b"),
    re.compile(r"<<.*?>>", re.DOTALL),
    re.compile(r"\[.*?\]"),
    re.compile(r"\(\)"),
    re.compile(r"\{\}"),
)
_NON_PRINTABLE_RE = re.compile(r"[^\x20-\x7E\r\n]")
_WHITESPACE_RE = re.compile(r"\s+")
_SPACING_FIXES: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"\s+\."), "."),
    (re.compile(r"\s+,"), ","),
    (re.compile(r"\s+;"), ";"),
    (re.compile(r"\s+:"), ":"),
    (re.compile(r"\s+\)"), ")"),
    (re.compile(r"\(\s+"), "("),
    (re.compile(r"\s+'(?=\w)"), "'"),
    (re.compile(r"(?<=\w)'\s+"), "'"),
    (re.compile(r'\s+"'), '"'),
    (re.compile(r'"\s+'), '"'),
    (re.compile(r"(\w)-\s+(\w)"), r"\1\2"),
    (re.compile(r"\s+-\s+"), "-"),
)
_SENTENCE_RE = re.compile(r"[A-Z][^.!?]{10,}[.!?]")
_BLOCK_SPLIT_RE = re.compile(r"\s{2,}")


@dataclass(slots=True, frozen=True)
class PdfHeader:
    """What a quick look at the start of the buffer tells us."""

    is_pdf: bool
    version: str
    literal_count: int
    document_type: str


@dataclass(slots=True, frozen=True)
class RawExtraction:
    """Text recovered from literal string runs before any cleaning."""

    text: str
    word_count: int
    char_count: int
    method: str = "parentheses"


def scan_header(content: str, file_name: str) -> PdfHeader:
    """Read the header marker and version from the first part of the buffer."""

    sample = content[:HEADER_SAMPLE_SIZE]
    version_match = _VERSION_RE.search(sample)
    return PdfHeader(
        is_pdf="%PDF" in sample,
        version=version_match.group(1) if version_match else "Unknown",
        literal_count=len(_LITERAL_RE.findall(sample)),
        document_type=guess_document_type(file_name),
    )


def recover_literals(content: str) -> RawExtraction:
    """Concatenate the interior of every parenthesized literal, space separated."""

    text = "".join(f"{literal} " for literal in _LITERAL_RE.findall(content))
    return RawExtraction(text=text, word_count=count_words(text), char_count=len(text))


def clean_pdf_text(text: str) -> str:
    """Turn recovered literal runs into readable text.

    Stages run in order: container artifacts, non-printable characters,
    spacing and hyphenation, then sentence reconstruction with a paragraph
    fallback when no well-formed sentence is found.
    """

    if not text:
        return ""

    processed = text
    for pattern in _ARTIFACT_PATTERNS:
        processed = pattern.sub(" ", processed)

    processed = _NON_PRINTABLE_RE.sub(" ", processed)

    processed = _WHITESPACE_RE.sub(" ", processed)
    for pattern, replacement in _SPACING_FIXES:
        processed = pattern.sub(replacement, processed)

    sentences = _SENTENCE_RE.findall(processed)
    if sentences:
        processed = " ".join(sentences)
    else:
        blocks = [
            block.strip()
            for block in _BLOCK_SPLIT_RE.split(processed)
            if len(block.strip()) > 30 and " " in block.strip()
        ]
        if blocks:
            processed = "\n\n".join(blocks)

    return _WHITESPACE_RE.sub(" ", processed).strip()


class PdfExtractor(FormatExtractor):
    """Best-effort, layout-agnostic text recovery from PDF byte streams."""

    kind = FileKind.PDF

    def _extract(self, file_ref: FileRef) -> ExtractionResult:
        content = file_ref.stored_path.read_bytes().decode("latin-1")
        header = scan_header(content, file_ref.original_name)
        raw = recover_literals(content)
        text = clean_pdf_text(raw.text)
        metadata = self._build_metadata(file_ref, text, raw, header)

        if metadata["word_count"] > DIRECT_TEXT_MIN_WORDS:
            return ExtractionResult(success=True, text=text, metadata=metadata)

        report = pdf_extraction_report(file_ref, text, metadata)
        metadata |= {"text_length": len(report), "is_report": True}
        return ExtractionResult(
            success=metadata["word_count"] > REPORT_SUCCESS_MIN_WORDS,
            text=report,
            metadata=metadata,
        )

    def _failure(self, file_ref: FileRef, error: Exception) -> ExtractionResult:
        message = str(error) or error.__class__.__name__
        report = pdf_error_report(file_ref, message)
        metadata = self._base_metadata(file_ref) | {
            "text_length": len(report),
            "has_text": False,
            "extraction_method": "error",
            "error": message,
        }
        return ExtractionResult(success=False, text=report, metadata=metadata, error=message)

    def _build_metadata(
        self,
        file_ref: FileRef,
        text: str,
        raw: RawExtraction,
        header: PdfHeader,
    ) -> dict[str, Any]:
        word_count = count_words(text)
        flags = content_flags(text)
        metadata = self._base_metadata(file_ref) | {
            "text_length": len(text),
            "word_count": word_count,
            "sentence_count": count_sentences(text),
            "paragraph_count": count_paragraphs(text),
            "has_text": word_count > 0,
            "extraction_method": raw.method,
            "confidence": confidence_for_word_count(word_count).value,
            "content_type": header.document_type,
            "is_pdf": header.is_pdf,
            "pdf_version": header.version,
            "literal_count": header.literal_count,
            "content_flags": flags.to_dict(),
            "raw_word_count": raw.word_count,
            "raw_char_count": raw.char_count,
            "cleaning_reduction": _reduction(len(text), raw.char_count),
        }
        metadata.update(_collect_pdf_metadata(file_ref.stored_path))
        return metadata


def _reduction(cleaned_chars: int, raw_chars: int) -> str:
    if raw_chars == 0:
        return "0%"
    return f"{round((1 - cleaned_chars / raw_chars) * 100)}%"


def _collect_pdf_metadata(path: Path) -> dict[str, Any]:
    metadata: dict[str, Any] = {"pages": None}
    try:
        with path.open("rb") as handle:
            document = PDFDocument(PDFParser(handle))
            metadata["is_extractable"] = bool(document.is_extractable)
            if document.info:
                for key, value in document.info[0].items():
                    key_text = key.decode("utf-8", "ignore") if isinstance(key, bytes) else str(key)
                    metadata[f"info_{key_text}"] = _info_value(value)
            metadata["pages"] = sum(1 for _ in PDFPage.create_pages(document))
    except (PSException, ValueError, KeyError, TypeError, AttributeError):
        metadata["pages"] = None
    return metadata


def _info_value(value: Any) -> str:
    if isinstance(value, bytes):
        return value.decode("latin-1", "ignore")
    return str(value)


__all__ = [
    "PdfExtractor",
    "PdfHeader",
    "RawExtraction",
    "clean_pdf_text",
    "recover_literals",
    "scan_header",
]
