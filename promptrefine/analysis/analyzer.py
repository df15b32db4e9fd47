from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from promptrefine.analysis.scoring import Confidence, confidence_for_word_count
from promptrefine.analysis.structure import (
    analyze_structure,
    count_paragraphs,
    count_sentences,
    count_words,
)
from promptrefine.analysis.topics import extract_topics, summarize


@dataclass(slots=True, frozen=True)
class TextAnalysis:
    """Derived view of a text blob, recomputed on demand."""

    word_count: int
    sentence_count: int
    paragraph_count: int
    has_headings: bool
    has_lists: bool
    has_references: bool
    topics: tuple[str, ...]
    summary: str
    confidence: Confidence

    def to_dict(self) -> dict[str, Any]:
        return {
            "word_count": self.word_count,
            "sentence_count": self.sentence_count,
            "paragraph_count": self.paragraph_count,
            "has_headings": self.has_headings,
            "has_lists": self.has_lists,
            "has_references": self.has_references,
            "topics": list(self.topics),
            "summary": self.summary,
            "confidence": self.confidence.value,
        }


def analyze_text(text: str, max_topics: int = 5, max_sentences: int = 3) -> TextAnalysis:
    """Run counts, structure, topic tagging and summarization over ``text``."""

    structure = analyze_structure(text)
    word_count = count_words(text)
    return TextAnalysis(
        word_count=word_count,
        sentence_count=count_sentences(text),
        paragraph_count=count_paragraphs(text),
        has_headings=structure.has_headings,
        has_lists=structure.has_lists,
        has_references=structure.has_references,
        topics=tuple(extract_topics(text, max_topics=max_topics)),
        summary=summarize(text, max_sentences=max_sentences),
        confidence=confidence_for_word_count(word_count),
    )


__all__ = ["TextAnalysis", "analyze_text"]
