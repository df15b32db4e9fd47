"""Human-readable fallback texts produced by the extractors."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from promptrefine.extraction.types import FileRef
from promptrefine.utils.files import format_file_size

RULE = "=" * 70
PREVIEW_LIMIT = 800

_FLAG_LINES = (
    ("has_code", "Contains code/technical content"),
    ("has_technical_terms", "Contains technical terms"),
    ("has_lists", "Contains lists/bullet points"),
    ("has_headings", "Contains headings/sections"),
    ("has_urls", "Contains URLs"),
    ("has_emails", "Contains email addresses"),
    ("has_dates", "Contains dates"),
)

# (exclusive lower bound on word count, status, verdict)
_QUALITY_BANDS = (
    (1000, "Excellent", "Excellent text extraction. Document is ready for detailed analysis."),
    (500, "Good", "Good text extraction. Suitable for most analysis tasks."),
    (100, "Fair", "Fair text extraction. May be sufficient for basic analysis."),
)
_LIMITED = ("Limited", "Limited text extraction. The document may be scanned or image based.")


def describe_file(file_ref: FileRef) -> str:
    """Name a file by its original name and, when different, its stored name."""

    stored = file_ref.stored_path.name
    if stored and stored != file_ref.original_name:
        return f"{file_ref.original_name} ({stored})"
    return file_ref.original_name


def failure_report(file_ref: FileRef, error: str) -> str:
    return "\n".join(
        [
            f"[Document: {describe_file(file_ref)}]",
            f"Type: {file_ref.extension or file_ref.declared_mime}",
            f"Size: {format_file_size(file_ref.size_bytes)}",
            f"Error: {error}",
        ]
    )


def quality_band(word_count: int) -> tuple[str, str]:
    for bound, status, verdict in _QUALITY_BANDS:
        if word_count > bound:
            return status, verdict
    return _LIMITED


def pdf_extraction_report(file_ref: FileRef, text: str, metadata: Mapping[str, Any]) -> str:
    """Summarize a PDF whose recovered text is too thin to pass on as-is."""

    word_count = metadata["word_count"]
    status, verdict = quality_band(word_count)
    lines = [
        "PDF DOCUMENT EXTRACTION REPORT",
        RULE,
        "",
        f"DOCUMENT: {describe_file(file_ref)}",
        f"SIZE: {metadata['formatted_size']}",
        f"TYPE: {metadata['content_type']}",
        f"STATUS: {status}",
        "",
        "EXTRACTION SUMMARY:",
        f"- Method: {metadata['extraction_method']}",
        f"- Words: {word_count:,}",
        f"- Sentences: {metadata['sentence_count']}",
        f"- Paragraphs: {metadata['paragraph_count']}",
        f"- Confidence: {metadata['confidence'].upper()}",
    ]
    if word_count > 0:
        preview = text if len(text) <= PREVIEW_LIMIT else text[:PREVIEW_LIMIT] + "..."
        lines += ["", "CONTENT PREVIEW:", RULE, preview, RULE]

    flags = metadata.get("content_flags", {})
    flag_lines = [f"- {label}" for key, label in _FLAG_LINES if flags.get(key)]
    lines += ["", "CONTENT ANALYSIS:", *(flag_lines or ["- No structural markers detected"])]

    lines += [
        "",
        "EXTRACTION DETAILS:",
        f"- Raw extraction: {metadata['raw_word_count']:,} words",
        f"- After cleaning: {word_count:,} words",
        f"- Cleaning reduction: {metadata['cleaning_reduction']}",
        f"- PDF Version: {metadata['pdf_version']}",
        "",
        verdict,
        "",
        "FOR BETTER RESULTS:",
    ]
    if word_count < 1000:
        lines += [
            "1. Export the document to text from the authoring application",
            "2. Try a dedicated PDF converter for complex layouts",
            "3. For scanned documents, upload page images for OCR",
        ]
    else:
        lines.append("Current extraction is sufficient for analysis.")
    return "\n".join(lines)


def pdf_error_report(file_ref: FileRef, error: str) -> str:
    return "\n".join(
        [
            "PDF PROCESSING ERROR",
            "=" * 50,
            "",
            f"Document: {describe_file(file_ref)}",
            f"Size: {format_file_size(file_ref.size_bytes)}",
            f"Error: {error}",
            "",
            "RECOMMENDATIONS:",
            "1. Verify the PDF is not corrupted",
            "2. Try opening it with a PDF reader",
            "3. Convert it to a text format if possible",
            "4. Try a different PDF file",
        ]
    )


def word_fallback_report(file_ref: FileRef, error: str) -> str:
    title = f"WORD DOCUMENT: {describe_file(file_ref)}"
    lines = [
        title,
        "=" * len(title),
        f"File Size: {format_file_size(file_ref.size_bytes)}",
        "",
        f"STATUS: Text could not be extracted ({error}).",
        "",
        "TO ENABLE TEXT EXTRACTION:",
        "1. Save the document in .docx format",
        "2. Make sure the file is not password protected or damaged",
        "3. Alternatively export it as PDF or plain text",
    ]
    if file_ref.extension == ".doc":
        lines += ["", "Note: legacy binary .doc files are not supported."]
    lines += ["", "The document has been uploaded successfully."]
    return "\n".join(lines)


def image_placeholder(file_ref: FileRef) -> str:
    return (
        f"[Placeholder OCR text for {describe_file(file_ref)}]\n"
        "Text recognition was unavailable; the image is included as visual context only."
    )


__all__ = [
    "PREVIEW_LIMIT",
    "describe_file",
    "failure_report",
    "image_placeholder",
    "pdf_error_report",
    "pdf_extraction_report",
    "quality_band",
    "word_fallback_report",
]
