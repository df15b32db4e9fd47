from __future__ import annotations

import re
from dataclasses import asdict, dataclass
from typing import Any

_WORD_RE = re.compile(r"\b\w+\b", re.ASCII)
_SENTENCE_RE = re.compile(r"[^.!?]+[.!?]+")
_PARAGRAPH_SPLIT_RE = re.compile(r"\n\s*\n")

_MARKDOWN_HEADING_RE = re.compile(r"^#{1,6}\s")
_TITLE_HEADING_RE = re.compile(r"^[A-Z][^.!?]*:$")
_BULLET_RE = re.compile(r"^[•\-*]\s")
_NUMBERED_RE = re.compile(r"^\d+[.)]\s")
_CHECKBOX_RE = re.compile(r"^\[(x| |)\]\s", re.IGNORECASE)
_NUMBER_RE = re.compile(r"\b\d+\b")
_CITATION_RE = re.compile(r"\[.*?\]")
_YEAR_RE = re.compile(r"\(.*?\d{4}.*?\)")
_URL_RE = re.compile(r"https?://")
_NON_PROSE_START_RE = re.compile(r"^[#•\-*\[(0-9]")
_CAPS_LINE_RE = re.compile(r"^[A-Z][A-Z\s]+$")

_CODE_RE = re.compile(r"function\s+\w+|const\s+\w+|let\s+\w+|var\s+\w+|import\s+|export\s+")
_LIST_MARKER_RE = re.compile(r"(?:^|\s)(?:\d+[.)]|[•\-*])\s")
_CAPS_HEADING_RE = re.compile(r"^[A-Z][A-Z\s]{2,}$", re.MULTILINE)
_URL_FLAG_RE = re.compile(r"https?://[\w.-]+\.[\w.-]+")
_EMAIL_RE = re.compile(r"[\w.-]+@[\w.-]+\.\w+")
_DATE_RE = re.compile(r"\b\d{1,2}[/-]\d{1,2}[/-]\d{2,4}\b")
_TECH_TERMS = ("api", "endpoint", "database", "server", "client", "framework", "library")


@dataclass(slots=True, frozen=True)
class DocumentStructure:
    """Line-level structural profile of a text."""

    has_headings: bool = False
    has_lists: bool = False
    has_numbers: bool = False
    has_references: bool = False
    paragraph_count: int = 0
    estimated_sections: int = 0
    line_count: int = 0
    average_line_length: int = 0
    avg_words_per_line: int = 0
    word_count: int = 0

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(slots=True, frozen=True)
class ContentFlags:
    """Coarse content markers used in extraction reports."""

    has_code: bool = False
    has_technical_terms: bool = False
    has_lists: bool = False
    has_headings: bool = False
    has_urls: bool = False
    has_emails: bool = False
    has_dates: bool = False

    def to_dict(self) -> dict[str, bool]:
        return asdict(self)


def count_words(text: str) -> int:
    """Count word tokens the way every score in the pipeline does."""

    return len(_WORD_RE.findall(text))


def count_sentences(text: str) -> int:
    return len(_SENTENCE_RE.findall(text))


def count_paragraphs(text: str) -> int:
    return sum(1 for block in _PARAGRAPH_SPLIT_RE.split(text) if block.strip())


def analyze_structure(text: str) -> DocumentStructure:
    """Classify every non-blank line as heading, list item, reference or prose.

    Headings are short all-caps lines, markdown ``#`` lines or ``Title:`` lines.
    List items start with a bullet, a ``1.``/``1)`` number or a checkbox.
    References are bracketed citations, parenthesized years or URLs. Prose
    paragraphs are lines longer than 40 characters that look like neither a
    list nor a heading.
    """

    lines = text.split("\n")
    has_headings = has_lists = has_numbers = has_references = False
    paragraph_count = 0
    estimated_sections = 0
    total_chars = 0

    for line in lines:
        trimmed = line.strip()
        total_chars += len(trimmed)
        if not trimmed:
            continue

        if _is_heading(trimmed):
            has_headings = True
            estimated_sections += 1

        if _BULLET_RE.match(trimmed) or _NUMBERED_RE.match(trimmed) or _CHECKBOX_RE.match(trimmed):
            has_lists = True

        if _NUMBER_RE.search(trimmed):
            has_numbers = True

        if _CITATION_RE.search(trimmed) or _YEAR_RE.search(trimmed) or _URL_RE.search(trimmed):
            has_references = True

        if (
            len(trimmed) > 40
            and not _NON_PROSE_START_RE.match(trimmed)
            and not _CAPS_LINE_RE.match(trimmed)
        ):
            paragraph_count += 1

    word_count = count_words(text)
    line_count = len(lines)
    return DocumentStructure(
        has_headings=has_headings,
        has_lists=has_lists,
        has_numbers=has_numbers,
        has_references=has_references,
        paragraph_count=paragraph_count,
        estimated_sections=estimated_sections,
        line_count=line_count,
        average_line_length=round(total_chars / line_count),
        avg_words_per_line=round(word_count / line_count),
        word_count=word_count,
    )


def content_flags(text: str) -> ContentFlags:
    """Detect code, technical vocabulary, lists, headings, URLs, emails and dates."""

    lowered = text.lower()
    return ContentFlags(
        has_code=bool(_CODE_RE.search(text)),
        has_technical_terms=any(term in lowered for term in _TECH_TERMS),
        has_lists=bool(_LIST_MARKER_RE.search(text)),
        has_headings=bool(_CAPS_HEADING_RE.search(text)),
        has_urls=bool(_URL_FLAG_RE.search(text)),
        has_emails=bool(_EMAIL_RE.search(text)),
        has_dates=bool(_DATE_RE.search(text)),
    )


def _is_heading(line: str) -> bool:
    if line == line.upper() and len(line) < 100 and any(char.isalpha() for char in line):
        return True
    return bool(_MARKDOWN_HEADING_RE.match(line) or _TITLE_HEADING_RE.match(line))


__all__ = [
    "ContentFlags",
    "DocumentStructure",
    "analyze_structure",
    "content_flags",
    "count_paragraphs",
    "count_sentences",
    "count_words",
]
