from __future__ import annotations

import re

BRIEF_SUMMARY = "Document content is too brief for summarization."
DEFAULT_TOPICS: tuple[str, ...] = ("General Document", "Information", "Content Analysis")

TOPIC_PATTERNS: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"\b(hackathon|competition|contest|challenge)\b"), "Hackathon/Competition"),
    (re.compile(r"\b(mern|react|node|express|mongodb|javascript)\b"), "MERN/Web Development"),
    (re.compile(r"\b(api|interface|protocol|endpoint)\b"), "API/Technical"),
    (
        re.compile(r"\b(ai|artificial intelligence|machine learning|ml|neural)\b"),
        "AI/Machine Learning",
    ),
    (re.compile(r"\b(design|ui|ux|interface|user experience)\b"), "Design/UI/UX"),
    (re.compile(r"\b(rules|guidelines|requirements|specifications)\b"), "Rules/Requirements"),
    (re.compile(r"\b(assignment|homework|project|task)\b"), "Assignment/Project"),
    (re.compile(r"\b(register|application|submit|participate)\b"), "Registration/Submission"),
    (re.compile(r"\b(student|participant|team|member)\b"), "Participants/Team"),
    (re.compile(r"\b(code|programming|software|development)\b"), "Coding/Development"),
    (re.compile(r"\b(data|analysis|statistics|metrics)\b"), "Data/Analysis"),
    (re.compile(r"\b(pdf|document|file|upload)\b"), "Document/File"),
    (re.compile(r"\b(hr|human resources|management|system)\b"), "HR/Management"),
)

# Checked in order against "<file name> <sample>"; the first hit wins.
DOCUMENT_TYPE_HINTS: tuple[tuple[tuple[str, ...], str, bool], ...] = (
    (("hackathon", "competition"), "Hackathon/Competition", False),
    (("assignment", "homework"), "Assignment/Homework", False),
    (("mern", "react", "node", "mongodb"), "MERN/Web Development", False),
    (("human resource", "hr ", "employee"), "HR/Management", False),
    (("resume", "cv"), "Resume/CV", True),
    (("contract", "agreement"), "Legal Document", True),
    (("invoice", "receipt"), "Financial Document", True),
    (("report", "analysis"), "Report/Analysis", True),
)

_SENTENCE_SPLIT_RE = re.compile(r"[.!?]+")
_ISO_DATE_RE = re.compile(r"\d{4}-\d{2}-\d{2}")
_SLASH_DATE_RE = re.compile(r"\b\d{1,2}/\d{1,2}/\d{4}\b")
_URL_MARKERS = ("http://", "https://", "www.")


def split_sentences(text: str) -> list[str]:
    """Split on sentence terminators, keeping fragments longer than 10 characters."""

    fragments = (fragment.strip() for fragment in _SENTENCE_SPLIT_RE.split(text))
    return [fragment for fragment in fragments if len(fragment) > 10]


def summarize(text: str, max_sentences: int = 3) -> str:
    """Return an extractive summary.

    Short inputs are returned whole. Longer ones are sampled at the first,
    middle and last sentence, in that order, so the result is deterministic
    and keeps the original ordering.
    """

    if not text or len(text) < 50:
        return BRIEF_SUMMARY
    sentences = split_sentences(text)
    if not sentences:
        return BRIEF_SUMMARY
    if len(sentences) <= max_sentences:
        return ". ".join(sentences) + "."
    picked = [sentences[0], sentences[len(sentences) // 2], sentences[-1]]
    return ". ".join(picked) + "."


def extract_topics(text: str, max_topics: int = 5) -> list[str]:
    """Tag a text with topic labels from the pattern table.

    A pattern only contributes its label when it matches at least twice.
    """

    if not text:
        return list(DEFAULT_TOPICS[:max_topics])

    lowered = text.lower()
    topics: dict[str, None] = {}
    for pattern, label in TOPIC_PATTERNS:
        if len(pattern.findall(lowered)) >= 2:
            topics[label] = None

    if len(text) > 1000:
        topics["Detailed Document"] = None
    if any(marker in lowered for marker in _URL_MARKERS):
        topics["Web/References"] = None
    if _ISO_DATE_RE.search(text) or _SLASH_DATE_RE.search(text):
        topics["Date/Time Related"] = None

    if not topics:
        return list(DEFAULT_TOPICS[:max_topics])
    return list(topics)[:max_topics]


def guess_document_type(file_name: str, sample: str = "") -> str:
    """Guess a coarse document category from its name and an optional text sample."""

    combined = f"{file_name} {sample}".lower()
    lowered_name = file_name.lower()
    for needles, label, name_only in DOCUMENT_TYPE_HINTS:
        haystack = lowered_name if name_only else combined
        if any(needle in haystack for needle in needles):
            return label
    return "General Document"


__all__ = [
    "BRIEF_SUMMARY",
    "DEFAULT_TOPICS",
    "DOCUMENT_TYPE_HINTS",
    "TOPIC_PATTERNS",
    "extract_topics",
    "guess_document_type",
    "split_sentences",
    "summarize",
]
