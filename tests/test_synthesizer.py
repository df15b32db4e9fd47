from __future__ import annotations

from pathlib import Path

import pytest

from promptrefine.config import Settings
from promptrefine.extraction.types import FileCategory, FileRef
from promptrefine.pipeline.models import ExtractedContent, ExtractedEntry, SynthesisRequest
from promptrefine.synthesis.styles import (
    GENERIC_FILE_GUIDANCE,
    OBJECTIVES,
    Style,
    creativity_level,
    file_guidance,
    quality_standards,
)
from promptrefine.synthesis.synthesizer import PROMPT_HEADER, PromptSynthesizer

WEATHER = "Create a weather dashboard that should show 7-day forecasts"


@pytest.fixture()
def synthesizer(temp_settings: Settings) -> PromptSynthesizer:
    return PromptSynthesizer(config=temp_settings)


def _request(style: Style, temperature: float = 0.7, content: ExtractedContent | None = None) -> SynthesisRequest:
    return SynthesisRequest(
        text_content="Technical Request: build it",
        file_narrative="",
        extracted_content=content or ExtractedContent(),
        style=style,
        max_length=350,
        temperature=temperature,
    )


def test_style_parse_falls_back_to_general() -> None:
    assert Style.parse("Technical") is Style.TECHNICAL
    assert Style.parse("poetic") is Style.GENERAL
    assert Style.parse(None) is Style.GENERAL
    assert not Style.is_known("poetic")


@pytest.mark.parametrize(
    ("temperature", "label"),
    [
        (1.0, "Highly creative/innovative"),
        (0.8, "Highly creative/innovative"),
        (0.6, "Creative with some constraints"),
        (0.5, "Balanced approach"),
        (0.2, "Focused and direct"),
        (0.1, "Precise and factual"),
    ],
)
def test_creativity_levels(temperature: float, label: str) -> None:
    assert creativity_level(temperature) == label


def test_quality_standards_follow_temperature_and_style() -> None:
    assert "High creativity and innovation" in quality_standards(Style.CREATIVE, 0.9)
    assert "Balanced approach" in quality_standards(Style.GENERAL, 0.7)
    assert "Precision and factuality" in quality_standards(Style.GENERAL, 0.4)
    assert "Evidence-based claims" in quality_standards(Style.TECHNICAL, 0.5)
    assert "Evidence-based claims" not in quality_standards(Style.CREATIVE, 0.5)


def test_file_guidance_tables() -> None:
    assert file_guidance(FileCategory.IMAGE, Style.CREATIVE).startswith("Consider visual storytelling")
    assert file_guidance(FileCategory.DOCUMENT, Style.DETAILED).startswith("Analyze arguments")
    assert file_guidance(FileCategory.OTHER, Style.TECHNICAL) == GENERIC_FILE_GUIDANCE


def test_refine_text_extracts_requirements(synthesizer: PromptSynthesizer) -> None:
    refined = synthesizer.refine_text(WEATHER, Style.TECHNICAL)

    assert refined.startswith(f"Technical Request: {WEATHER}")
    assert "• Specifications and parameters" in refined
    assert "Identified Requirements:\n• show 7-day forecasts" in refined
    assert "Intent Category: development" in refined
    assert "Clarity Score:" in refined


def test_refine_text_lists_constraints_and_entities(synthesizer: PromptSynthesizer) -> None:
    refined = synthesizer.refine_text(
        "Write a blog post about React. It cannot exceed 800 words; deadline is Friday.",
        Style.CREATIVE,
    )

    assert refined.startswith("Creative Concept:")
    assert "Constraints:" in refined
    assert "• exceed 800 words" in refined
    assert "technology: react" in refined


def test_compose_builds_sections(synthesizer: PromptSynthesizer) -> None:
    content = ExtractedContent(
        images=(ExtractedEntry(filename="a.png", kind="image"),),
        documents=(
            ExtractedEntry(filename="b.pdf", kind="document"),
            ExtractedEntry(filename="c.txt", kind="document"),
        ),
    )

    prompt = synthesizer.compose(_request(Style.TECHNICAL, content=content))

    assert prompt.startswith(PROMPT_HEADER)
    assert "### Text Input Processing\nTechnical Request: build it" in prompt
    assert f"**Primary Objective:** {OBJECTIVES[Style.TECHNICAL]}" in prompt
    assert "1. **Length:** Approximately 350 words" in prompt
    assert "2. **Style:** technical (Precise, systematic, data-driven)" in prompt
    assert "3. **Creativity Level:** 0.7/1.0 (Creative with some constraints)" in prompt
    assert "• Incorporate visual analysis from 1 image(s)" in prompt
    assert "• Reference and analyze content from 2 document(s)" in prompt
    assert "• Use code blocks if applicable" in prompt
    assert "• Systematic approach" in prompt


def test_validate_flags_weak_prompts(synthesizer: PromptSynthesizer) -> None:
    weak = synthesizer.validate("plain words", Style.TECHNICAL)

    assert not weak.valid
    assert weak.warnings == (
        "Prompt may be too brief for effective refinement",
        "Prompt lacks clear section headers",
        "Prompt may lack clear response requirements",
        "Technical prompt may lack specificity requirements",
    )
    assert weak.section_count == 0

    strong = synthesizer.validate(synthesizer.compose(_request(Style.TECHNICAL)), Style.TECHNICAL)
    assert strong.valid
    assert strong.section_count >= 6


def test_finalize_appends_footer(synthesizer: PromptSynthesizer) -> None:
    final = synthesizer.finalize("# Body\n", Style.CONCISE, 200, 0.3, "Text input (5 chars)")

    assert final.startswith("# Body\n\n---\n**PROMPT METADATA**\n")
    assert "• Style: concise" in final
    assert "• Target Length: 200 words" in final
    assert "• Creativity: 0.3/1.0" in final
    assert "• Input Summary: Text input (5 chars)" in final
    assert "• System: Multi-Modal Prompt Refinement System v1.0.0" in final


def test_describe_inputs(tmp_path: Path) -> None:
    files = [
        FileRef("brief.pdf", tmp_path / "a", "application/pdf", 1),
        FileRef("shot.png", tmp_path / "b", "image/png", 1),
        FileRef("README", tmp_path / "c", "text/plain", 1),
    ]

    summary = PromptSynthesizer.describe_inputs("hello", files, ["one"])

    assert summary == "Text input (5 chars) + 3 file(s): PDF, PNG, UNKNOWN [1 processing assumptions]"
    assert PromptSynthesizer.describe_inputs(None, [], []) == "No input specified"


def test_synthesize_records_validation_assumptions(synthesizer: PromptSynthesizer) -> None:
    outcome = synthesizer.synthesize(_request(Style.GENERAL), ["Text prompt processed and refined"])

    assert outcome.validation.valid
    assert "**PROMPT METADATA**" in outcome.prompt
    assert outcome.assumptions == ["Text prompt processed and refined"]
