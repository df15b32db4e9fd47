"""Canned wording for each refinement style, kept as plain lookup tables."""

from __future__ import annotations

from enum import Enum

from promptrefine.extraction.types import FileCategory


class Style(str, Enum):
    GENERAL = "general"
    CREATIVE = "creative"
    TECHNICAL = "technical"
    ANALYTICAL = "analytical"
    CONCISE = "concise"
    DETAILED = "detailed"

    @classmethod
    def parse(cls, value: str | None) -> Style:
        """Return the matching style, falling back to ``general``."""

        if value is None:
            return cls.GENERAL
        try:
            return cls(value.strip().lower())
        except ValueError:
            return cls.GENERAL

    @classmethod
    def is_known(cls, value: str | None) -> bool:
        return value is not None and value.strip().lower() in {style.value for style in cls}


OBJECTIVES: dict[Style, str] = {
    Style.CREATIVE: "Create engaging, imaginative content with strong narrative and emotional elements",
    Style.TECHNICAL: "Provide precise, detailed technical information with clear specifications",
    Style.ANALYTICAL: "Deliver critical analysis with balanced perspective and evidence-based conclusions",
    Style.CONCISE: "Present essential information clearly and efficiently",
    Style.DETAILED: "Offer comprehensive, thorough coverage of all relevant aspects",
    Style.GENERAL: "Provide balanced, informative response with practical examples",
}

DESCRIPTIONS: dict[Style, str] = {
    Style.CREATIVE: "Imaginative, expressive, narrative-focused",
    Style.TECHNICAL: "Precise, systematic, data-driven",
    Style.ANALYTICAL: "Critical, evaluative, evidence-based",
    Style.CONCISE: "Direct, brief, to-the-point",
    Style.DETAILED: "Thorough, comprehensive, exhaustive",
    Style.GENERAL: "Balanced, informative, accessible",
}

# (inclusive lower bound on temperature, descriptor), checked top-down
CREATIVITY_LEVELS: tuple[tuple[float, str], ...] = (
    (0.8, "Highly creative/innovative"),
    (0.6, "Creative with some constraints"),
    (0.4, "Balanced approach"),
    (0.2, "Focused and direct"),
)
PRECISE_LEVEL = "Precise and factual"

STRUCTURES: dict[Style, str] = {
    Style.CREATIVE: "Narrative flow with introduction, development, and conclusion",
    Style.TECHNICAL: "Logical sequence: overview → details → applications → summary",
    Style.ANALYTICAL: "Thesis → evidence → analysis → conclusion format",
    Style.CONCISE: "Bulleted lists or very short paragraphs",
    Style.DETAILED: "Hierarchical structure with multiple levels of detail",
    Style.GENERAL: "Clear sections with headings and logical progression",
}

CONTENT_EXPECTATIONS: dict[Style, tuple[str, ...]] = {
    Style.CREATIVE: (
        "Develop characters/themes/narrative",
        "Use vivid sensory descriptions",
        "Create emotional resonance",
        "Include imaginative elements",
        "Ensure engaging storytelling",
    ),
    Style.TECHNICAL: (
        "Include specifications and data",
        "Provide practical applications",
        "Use precise terminology",
        "Follow systematic approach",
        "Reference relevant frameworks",
    ),
    Style.ANALYTICAL: (
        "Present balanced arguments",
        "Cite specific evidence",
        "Consider multiple perspectives",
        "Identify assumptions/biases",
        "Draw logical conclusions",
    ),
    Style.CONCISE: (
        "Prioritize key information",
        "Eliminate redundancy",
        "Use clear, direct language",
        "Focus on essentials",
        "Avoid elaboration",
    ),
    Style.DETAILED: (
        "Cover all relevant aspects",
        "Provide thorough explanations",
        "Include multiple examples",
        "Add context and background",
        "Address nuances",
    ),
    Style.GENERAL: (
        "Clear explanations",
        "Practical examples",
        "Balanced perspective",
        "Useful insights",
        "Accessible language",
    ),
}

FORMATTING_GUIDELINES: dict[Style, tuple[str, ...]] = {
    Style.CREATIVE: (
        "Use paragraphs for narrative flow",
        "Include descriptive sections",
        "Vary sentence structure for rhythm",
        "Use emphasis for emotional impact",
    ),
    Style.TECHNICAL: (
        "Use headings and subheadings",
        "Include lists for specifications",
        "Use code blocks if applicable",
        "Add tables for comparisons",
    ),
    Style.ANALYTICAL: (
        "Clear section headers",
        "Evidence presented in lists",
        "Conclusions highlighted",
        "Citations formatted consistently",
    ),
    Style.CONCISE: (
        "Bulleted or numbered lists",
        "Short, direct sentences",
        "Clear, uncluttered layout",
        "Prioritized information",
    ),
    Style.DETAILED: (
        "Hierarchical structure",
        "Multiple subsections",
        "Detailed examples indented",
        "Cross-references if needed",
    ),
    Style.GENERAL: (
        "Clear section breaks",
        "Mix of paragraphs and lists",
        "Consistent formatting",
        "Readable layout",
    ),
}

BASE_QUALITY_STANDARDS: tuple[str, ...] = (
    "Accuracy and relevance",
    "Clarity and coherence",
    "Completeness of response",
)
# (exclusive lower bound on temperature, standards), checked top-down
TEMPERATURE_QUALITY_STANDARDS: tuple[tuple[float, tuple[str, ...]], ...] = (
    (0.7, ("High creativity and innovation", "Originality of approach", "Engaging presentation")),
    (0.4, ("Appropriate creativity level", "Balanced approach", "Effective communication")),
)
LOW_TEMPERATURE_STANDARDS: tuple[str, ...] = (
    "Precision and factuality",
    "Direct communication",
    "Minimal ambiguity",
)
RIGOR_STANDARDS: tuple[str, ...] = (
    "Evidence-based claims",
    "Logical reasoning",
    "Systematic approach",
)
RIGOROUS_STYLES = frozenset({Style.ANALYTICAL, Style.TECHNICAL})

FOCUS_AREAS: dict[Style, tuple[str, tuple[str, ...]]] = {
    Style.CREATIVE: (
        "Creative Concept",
        (
            "Narrative development",
            "Character/theme exploration",
            "Emotional resonance",
            "Vivid descriptions",
            "Imaginative scenarios",
        ),
    ),
    Style.TECHNICAL: (
        "Technical Request",
        (
            "Specifications and parameters",
            "Systematic analysis",
            "Data and evidence",
            "Practical applications",
            "Clear methodology",
        ),
    ),
    Style.ANALYTICAL: (
        "Analytical Inquiry",
        (
            "Critical examination",
            "Evidence evaluation",
            "Multiple perspectives",
            "Objective assessment",
            "Logical conclusions",
        ),
    ),
    Style.CONCISE: (
        "Direct Request",
        (
            "Essential information only",
            "Clear, direct points",
            "No unnecessary elaboration",
            "Bulleted format preferred",
        ),
    ),
    Style.DETAILED: (
        "Comprehensive Request",
        (
            "Thorough coverage",
            "All relevant aspects",
            "Context and background",
            "Detailed examples",
            "Complete analysis",
        ),
    ),
    Style.GENERAL: (
        "General Inquiry",
        (
            "Clear explanation",
            "Balanced perspective",
            "Practical examples",
            "Useful insights",
            "Accessible format",
        ),
    ),
}

# Styles without their own row use the analytical one.
FILE_GUIDANCE: dict[Style, dict[FileCategory, str]] = {
    Style.CREATIVE: {
        FileCategory.IMAGE: "Consider visual storytelling, emotional impact, and creative interpretation.",
        FileCategory.DOCUMENT: "Extract narrative elements, themes, characters, or creative concepts.",
    },
    Style.TECHNICAL: {
        FileCategory.IMAGE: "Analyze diagrams, schematics, data visualizations, or technical illustrations.",
        FileCategory.DOCUMENT: "Extract specifications, procedures, data, requirements, and technical details.",
    },
    Style.ANALYTICAL: {
        FileCategory.IMAGE: "Examine for data patterns, visual arguments, evidence presentation, or analytical content.",
        FileCategory.DOCUMENT: "Analyze arguments, evidence, logic, structure, and conclusions.",
    },
}
GENERIC_FILE_GUIDANCE = "Consider relevance to the overall request."


def creativity_level(temperature: float) -> str:
    for bound, label in CREATIVITY_LEVELS:
        if temperature >= bound:
            return label
    return PRECISE_LEVEL


def quality_standards(style: Style, temperature: float) -> list[str]:
    standards = list(BASE_QUALITY_STANDARDS)
    for bound, extra in TEMPERATURE_QUALITY_STANDARDS:
        if temperature > bound:
            standards.extend(extra)
            break
    else:
        standards.extend(LOW_TEMPERATURE_STANDARDS)
    if style in RIGOROUS_STYLES:
        standards.extend(RIGOR_STANDARDS)
    return standards


def file_guidance(category: FileCategory, style: Style) -> str:
    """Pick the per-file hint for a reporting category under ``style``."""

    table = FILE_GUIDANCE.get(style, FILE_GUIDANCE[Style.ANALYTICAL])
    return table.get(category, GENERIC_FILE_GUIDANCE)


__all__ = [
    "CONTENT_EXPECTATIONS",
    "DESCRIPTIONS",
    "FILE_GUIDANCE",
    "FOCUS_AREAS",
    "FORMATTING_GUIDELINES",
    "GENERIC_FILE_GUIDANCE",
    "OBJECTIVES",
    "STRUCTURES",
    "Style",
    "creativity_level",
    "file_guidance",
    "quality_standards",
]
