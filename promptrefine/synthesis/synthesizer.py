from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from promptrefine import __version__
from promptrefine.analysis.entities import categorize_intent, extract_entities, group_entities
from promptrefine.analysis.scoring import (
    calculate_clarity_score,
    calculate_complexity,
    extract_constraints,
    extract_requirements,
)
from promptrefine.config import Settings, settings
from promptrefine.extraction.types import FileRef
from promptrefine.pipeline.models import ExtractedContent, SynthesisRequest
from promptrefine.synthesis.styles import (
    CONTENT_EXPECTATIONS,
    DESCRIPTIONS,
    FOCUS_AREAS,
    FORMATTING_GUIDELINES,
    OBJECTIVES,
    STRUCTURES,
    Style,
    creativity_level,
    quality_standards,
)

PROMPT_HEADER = "# PROMPT REFINEMENT SYSTEM OUTPUT"
SYSTEM_BANNER = f"Multi-Modal Prompt Refinement System v{__version__}"
MIN_PROMPT_LENGTH = 100

_SECTION_RE = re.compile(r"#{1,3}\s")


@dataclass(slots=True, frozen=True)
class PromptValidation:
    valid: bool
    warnings: tuple[str, ...]
    prompt_length: int
    section_count: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "valid": self.valid,
            "warnings": list(self.warnings),
            "prompt_length": self.prompt_length,
            "section_count": self.section_count,
        }


@dataclass(slots=True)
class SynthesisOutcome:
    prompt: str
    validation: PromptValidation
    assumptions: list[str] = field(default_factory=list)


def _bullets(items: Sequence[str]) -> str:
    return "\n".join(f"• {item}" for item in items)


class PromptSynthesizer:
    """Turn refined text and the file narrative into a structured prompt."""

    def __init__(self, config: Settings = settings) -> None:
        self.config = config

    def refine_text(self, text: str, style: Style) -> str:
        """Frame the direct text input with focus areas and what it asks for."""

        prefix, focus_areas = FOCUS_AREAS[style]
        blocks = [f"{prefix}: {text}", f"Focus Areas:\n{_bullets(focus_areas)}"]

        requirements = extract_requirements(text, max_items=self.config.max_requirements)
        if requirements:
            blocks.append(f"Identified Requirements:\n{_bullets(requirements)}")
        constraints = extract_constraints(text, max_items=self.config.max_constraints)
        if constraints:
            blocks.append(f"Constraints:\n{_bullets(constraints)}")
        grouped = group_entities(extract_entities(text))
        if grouped:
            lines = [f"{kind}: {', '.join(values)}" for kind, values in grouped.items()]
            blocks.append(f"Detected Entities:\n{_bullets(lines)}")

        blocks.append(
            "\n".join(
                [
                    f"Intent Category: {categorize_intent(text)}",
                    f"Clarity Score: {calculate_clarity_score(text):.2f}",
                    f"Complexity Score: {calculate_complexity(text):.2f}",
                ]
            )
        )
        return "\n\n".join(blocks)

    def compose(self, request: SynthesisRequest) -> str:
        style = request.style
        parts = [PROMPT_HEADER, "## Input Analysis and Structured Request", ""]
        if request.text_content:
            parts += ["### Text Input Processing", request.text_content, ""]
        if request.file_narrative:
            parts += [request.file_narrative, ""]

        parts += [
            "## Refined Prompt Structure",
            "",
            f"**Primary Objective:** {OBJECTIVES[style]}",
            "",
            "### Response Requirements",
            f"1. **Length:** Approximately {request.max_length} words",
            f"2. **Style:** {style.value} ({DESCRIPTIONS[style]})",
            f"3. **Creativity Level:** {request.temperature:g}/1.0 "
            f"({creativity_level(request.temperature)})",
            f"4. **Structure:** {STRUCTURES[style]}",
            "",
            "### Content Expectations",
            self._content_expectations(style, request.extracted_content),
            "",
            "### Formatting Guidelines",
            _bullets(FORMATTING_GUIDELINES[style]),
            "",
            "### Quality Standards",
            _bullets(quality_standards(style, request.temperature)),
        ]
        return "\n".join(parts) + "\n"

    def validate(self, prompt: str, style: Style) -> PromptValidation:
        """Check the composed prompt; problems become warnings, never errors."""

        lowered = prompt.lower()
        warnings: list[str] = []
        if len(prompt) < MIN_PROMPT_LENGTH:
            warnings.append("Prompt may be too brief for effective refinement")
        if "#" not in prompt:
            warnings.append("Prompt lacks clear section headers")
        if "response" not in lowered and "include" not in lowered:
            warnings.append("Prompt may lack clear response requirements")
        if style is Style.TECHNICAL and "specif" not in lowered:
            warnings.append("Technical prompt may lack specificity requirements")
        return PromptValidation(
            valid=not warnings,
            warnings=tuple(warnings),
            prompt_length=len(prompt),
            section_count=len(_SECTION_RE.findall(prompt)),
        )

    def finalize(
        self,
        prompt: str,
        style: Style,
        max_length: int,
        temperature: float,
        input_summary: str,
    ) -> str:
        footer = [
            "",
            "",
            "---",
            "**PROMPT METADATA**",
            f"• Generated: {datetime.now(tz=UTC).isoformat()}",
            f"• Style: {style.value}",
            f"• Target Length: {max_length} words",
            f"• Creativity: {temperature:g}/1.0",
            f"• Input Summary: {input_summary}",
            f"• System: {SYSTEM_BANNER}",
        ]
        return prompt.rstrip("\n") + "\n".join(footer) + "\n"

    @staticmethod
    def describe_inputs(
        text: str | None,
        files: Sequence[FileRef],
        assumptions: Sequence[str],
    ) -> str:
        """One-line summary such as ``Text input (42 chars) + 2 file(s): PDF, PNG``."""

        parts = []
        if text:
            parts.append(f"Text input ({len(text)} chars)")
        if files:
            extensions = [
                Path(file_ref.original_name).suffix.upper().lstrip(".") or "UNKNOWN"
                for file_ref in files
            ]
            parts.append(f"{len(files)} file(s): {', '.join(extensions)}")
        summary = " + ".join(parts)
        if assumptions:
            summary += f" [{len(assumptions)} processing assumptions]"
        return summary or "No input specified"

    def synthesize(self, request: SynthesisRequest, assumptions: Sequence[str] = ()) -> SynthesisOutcome:
        """Compose, validate and finalize in one go."""

        collected = list(assumptions)
        prompt = self.compose(request)
        validation = self.validate(prompt, request.style)
        collected.extend(f"Validation: {warning}" for warning in validation.warnings)
        summary = self.describe_inputs(request.input_text, request.files, collected)
        final = self.finalize(prompt, request.style, request.max_length, request.temperature, summary)
        return SynthesisOutcome(prompt=final, validation=validation, assumptions=collected)

    @staticmethod
    def _content_expectations(style: Style, content: ExtractedContent) -> str:
        lines = []
        if content.images:
            lines.append(f"Incorporate visual analysis from {len(content.images)} image(s)")
        if content.documents:
            lines.append(f"Reference and analyze content from {len(content.documents)} document(s)")
        lines.extend(CONTENT_EXPECTATIONS[style])
        return _bullets(lines)


__all__ = ["PROMPT_HEADER", "PromptSynthesizer", "PromptValidation", "SynthesisOutcome"]
