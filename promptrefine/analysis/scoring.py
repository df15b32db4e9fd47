from __future__ import annotations

import re
from collections.abc import Iterable
from enum import Enum


class Confidence(str, Enum):
    """Coarse label for how much usable text was recovered."""

    VERY_HIGH = "very-high"
    HIGH = "high"
    MEDIUM_HIGH = "medium-high"
    MEDIUM = "medium"
    MEDIUM_LOW = "medium-low"
    LOW = "low"


# (exclusive lower bound on word count, label), highest first
CONFIDENCE_THRESHOLDS: tuple[tuple[int, Confidence], ...] = (
    (10000, Confidence.VERY_HIGH),
    (5000, Confidence.HIGH),
    (2000, Confidence.MEDIUM_HIGH),
    (500, Confidence.MEDIUM),
    (100, Confidence.MEDIUM_LOW),
)

REQUIREMENT_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"\b(?:should|must|need to|requires?|shall)\s+(.+?)(?=[.!;\n]|$)", re.IGNORECASE),
    re.compile(
        r"\b(?:feature|functionality|capability)\s+(?:of|to|that)\s+(.+?)(?=[.!;\n]|$)",
        re.IGNORECASE,
    ),
    re.compile(r"\b(?:able to|capable of)\s+(.+?)(?=[.!;\n]|$)", re.IGNORECASE),
    re.compile(r"\b(?:support|include|have)\s+(.+?)(?=[.!;\n]|$)", re.IGNORECASE),
)

CONSTRAINT_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"\b(?:cannot|can't|must not|should not)\s+(.+?)(?=[.!;\n]|$)", re.IGNORECASE),
    re.compile(r"\b(?:limited to|restricted to|only)\s+(.+?)(?=[.!;\n]|$)", re.IGNORECASE),
    re.compile(r"\b(?:budget|cost|price)\s+(?:of|is|:)\s*(.+?)(?=[.!;\n]|$)", re.IGNORECASE),
    re.compile(r"\b(?:deadline|due|timeline)\s+(?:is|:)\s*(.+?)(?=[.!;\n]|$)", re.IGNORECASE),
    re.compile(
        r"\b(?:constraint|limitation|restriction)\s+(?:is|:)\s*(.+?)(?=[.!;\n]|$)",
        re.IGNORECASE,
    ),
)

_COMPLEXITY_TERMS = ("api", "database", "server", "client", "framework", "library", "algorithm")
_CLARITY_TECH_RE = re.compile(r"\b(api|database|server|client|frontend|backend|ui|ux)\b", re.IGNORECASE)
_SENTENCE_SPLIT_RE = re.compile(r"[.!?]+")
_NUMBERED_RE = re.compile(r"\d+\.\s")
_LABEL_RE = re.compile(r"[A-Z][a-z]+:")
_BULLETS = ("- ", "* ", "• ")


def confidence_for_word_count(word_count: int) -> Confidence:
    """Map a cleaned word count onto the confidence table."""

    for bound, label in CONFIDENCE_THRESHOLDS:
        if word_count > bound:
            return label
    return Confidence.LOW


def extract_requirements(text: str, max_items: int | None = None) -> list[str]:
    """Collect what follows "should/must/need to/..." up to the next sentence boundary."""

    return _collect(REQUIREMENT_PATTERNS, text, max_items)


def extract_constraints(text: str, max_items: int | None = None) -> list[str]:
    """Collect what follows "cannot/must not/limited to/..." up to the next sentence boundary."""

    return _collect(CONSTRAINT_PATTERNS, text, max_items)


def calculate_complexity(text: str) -> float:
    """Score sentence length, word length and technical vocabulary on a 0..1 scale."""

    if not text:
        return 0.0
    sentences = [part for part in _SENTENCE_SPLIT_RE.split(text) if part.strip()]
    words = text.split()
    if not sentences or not words:
        return 0.0

    avg_words_per_sentence = len(words) / len(sentences)
    avg_word_length = sum(len(word) for word in words) / len(words)

    score = 0.3
    if avg_words_per_sentence > 15:
        score += 0.2
    if avg_words_per_sentence > 25:
        score += 0.2
    if avg_word_length > 5:
        score += 0.2
    if avg_word_length > 7:
        score += 0.1
    lowered = text.lower()
    if any(term in lowered for term in _COMPLEXITY_TERMS):
        score += 0.1
    return _clamp(score)


def calculate_clarity_score(text: str) -> float:
    """Score length, list/heading structure and stated requirements on a 0..1 scale."""

    score = 0.5
    word_count = len(text.split())
    if word_count > 100:
        score += 0.1
    if word_count > 200:
        score += 0.1

    if any(bullet in text for bullet in _BULLETS) or _NUMBERED_RE.search(text):
        score += 0.1
    if ":" in text or _LABEL_RE.search(text):
        score += 0.1

    requirements = extract_requirements(text)
    if requirements:
        score += 0.1
    if len(requirements) > 2:
        score += 0.1
    if extract_constraints(text):
        score += 0.1

    if _CLARITY_TECH_RE.search(text):
        score += 0.1
    return _clamp(score)


def _collect(patterns: Iterable[re.Pattern[str]], text: str, max_items: int | None) -> list[str]:
    found: dict[str, None] = {}
    for pattern in patterns:
        for match in pattern.finditer(text):
            captured = match.group(1).strip()
            if captured:
                found[captured] = None
    items = list(found)
    if max_items is not None:
        return items[:max_items]
    return items


def _clamp(score: float) -> float:
    return round(min(max(score, 0.0), 1.0), 2)


__all__ = [
    "CONFIDENCE_THRESHOLDS",
    "CONSTRAINT_PATTERNS",
    "Confidence",
    "REQUIREMENT_PATTERNS",
    "calculate_clarity_score",
    "calculate_complexity",
    "confidence_for_word_count",
    "extract_constraints",
    "extract_requirements",
]
