from __future__ import annotations

import re
from collections.abc import Callable, Iterable
from dataclasses import dataclass


@dataclass(slots=True, frozen=True)
class EntityMatch:
    """Representation of an entity mentioned in a request."""

    kind: str
    value: str
    normalized: str | None = None


_TECHNOLOGIES = (
    "react",
    "angular",
    "vue",
    "node",
    "python",
    "java",
    "javascript",
    "typescript",
    "mongodb",
    "mysql",
    "postgresql",
    "aws",
    "azure",
    "docker",
    "kubernetes",
    "api",
    "rest",
    "graphql",
)
_PLATFORMS = (
    "web",
    "mobile",
    "desktop",
    "ios",
    "android",
    "windows",
    "mac",
    "linux",
    "cloud",
    "server",
    "responsive",
)
_BUDGET_RE = re.compile(
    r"\$\d+(?:,\d+)*(?:\.\d+)?|\b\d+(?:,\d+)*(?:\.\d+)?\s*(?:dollars|dollar|usd)\b",
    re.IGNORECASE,
)
_TIMELINE_RE = re.compile(
    r"\b\d+\s*(?:days|weeks|months|years)\b|\bdeadline\b|\btimeline\b|\bby\s+\w+\s+\d+",
    re.IGNORECASE,
)

INTENT_KEYWORDS: dict[str, tuple[str, ...]] = {
    "development": ("build", "create", "develop", "code", "program", "app", "website", "software"),
    "design": ("design", "ui", "ux", "interface", "mockup", "wireframe", "prototype"),
    "analysis": ("analyze", "report", "research", "study", "data", "insights"),
    "content": ("write", "content", "article", "blog", "copy", "documentation"),
    "business": ("strategy", "plan", "proposal", "business", "marketing", "sales"),
}


def extract_entities(text: str) -> list[EntityMatch]:
    """Extract technologies, platforms, budgets and timelines from a request."""

    lowered = text.lower()
    entities: list[EntityMatch] = []
    entities.extend(_emit_keywords("technology", _TECHNOLOGIES, lowered))
    entities.extend(_emit_keywords("platform", _PLATFORMS, lowered))
    entities.extend(
        _emit_matches("budget", _BUDGET_RE.findall(text), normalizer=_normalize_amount)
    )
    entities.extend(
        _emit_matches("timeline", _TIMELINE_RE.findall(text), normalizer=str.lower)
    )
    return entities


def group_entities(entities: Iterable[EntityMatch]) -> dict[str, list[str]]:
    """Group entity values by kind, preserving discovery order."""

    grouped: dict[str, list[str]] = {}
    for entity in entities:
        grouped.setdefault(entity.kind, []).append(entity.value)
    return grouped


def categorize_intent(text: str) -> str:
    """Return the intent category whose keywords appear most often, or "general"."""

    lowered = text.lower()
    best_category = "general"
    best_score = 0
    for category, keywords in INTENT_KEYWORDS.items():
        score = sum(1 for keyword in keywords if keyword in lowered)
        if score > best_score:
            best_category, best_score = category, score
    return best_category


def _emit_keywords(kind: str, keywords: Iterable[str], lowered: str) -> list[EntityMatch]:
    return [
        EntityMatch(kind=kind, value=keyword, normalized=keyword)
        for keyword in keywords
        if keyword in lowered
    ]


def _emit_matches(
    kind: str,
    values: Iterable[str],
    normalizer: Callable[[str], str] | None = None,
) -> list[EntityMatch]:
    results: list[EntityMatch] = []
    seen: set[str] = set()
    for value in values:
        normalized = normalizer(value) if normalizer else value
        if normalized in seen:
            continue
        seen.add(normalized)
        results.append(EntityMatch(kind=kind, value=value, normalized=normalized))
    return results


def _normalize_amount(value: str) -> str:
    digits = re.sub(r"[^\d.]", "", value)
    return f"USD {digits}"


__all__ = ["EntityMatch", "INTENT_KEYWORDS", "categorize_intent", "extract_entities", "group_entities"]
