from __future__ import annotations

import time
from collections.abc import Iterable
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from enum import Enum
from uuid import uuid4

from promptrefine.analysis.analyzer import analyze_text
from promptrefine.config import Settings, settings
from promptrefine.exceptions import ValidationError
from promptrefine.ingest.service import IngestionCoordinator
from promptrefine.pipeline.models import (
    ExtractedContent,
    ExtractedEntry,
    InputBundle,
    RefinedPromptResult,
    SynthesisRequest,
)
from promptrefine.synthesis.styles import Style
from promptrefine.synthesis.synthesizer import PromptSynthesizer
from promptrefine.utils.audit import AuditTrail

EMPTY_INPUT_MESSAGE = "At least one input (text or file) is required"


class PipelineState(str, Enum):
    START = "start"
    TEXT_PROCESSED = "text_processed"
    FILES_PROCESSED = "files_processed"
    SYNTHESIZED = "synthesized"
    VALIDATED = "validated"
    DONE = "done"


_STATE_ORDER: tuple[PipelineState, ...] = tuple(PipelineState)


@dataclass(slots=True)
class PipelineRun:
    """Per-call record of the states a refinement has passed through."""

    audit: AuditTrail
    visited: list[PipelineState] = field(default_factory=lambda: [PipelineState.START])

    @property
    def state(self) -> PipelineState:
        return self.visited[-1]

    def advance(self, target: PipelineState) -> None:
        position = _STATE_ORDER.index(self.state)
        if position + 1 >= len(_STATE_ORDER) or _STATE_ORDER[position + 1] is not target:
            msg = f"cannot move from {self.state.value} to {target.value}"
            raise RuntimeError(msg)
        self.visited.append(target)
        self.audit.record("info", "refine.state", state=target.value)


class RefinementOrchestrator:
    """Entry point of the pipeline: text, files, synthesis, validation, metadata."""

    def __init__(
        self,
        config: Settings = settings,
        coordinator: IngestionCoordinator | None = None,
        synthesizer: PromptSynthesizer | None = None,
    ) -> None:
        self.config = config
        self.coordinator = coordinator or IngestionCoordinator(config=config)
        self.synthesizer = synthesizer or PromptSynthesizer(config=config)

    def refine(
        self,
        bundle: InputBundle,
        style: str | None = None,
        max_length: int | None = None,
        temperature: float | None = None,
    ) -> RefinedPromptResult:
        """Refine one bundle; raises ``ValidationError`` only when it is empty."""

        if bundle.is_empty:
            raise ValidationError(EMPTY_INPUT_MESSAGE)

        audit = AuditTrail(self.config.audit_dir)
        text = bundle.text.strip() if bundle.has_text else None
        audit.record(
            "info",
            "refine.received",
            has_text=text is not None,
            files=len(bundle.files),
            style=style,
        )

        assumptions: list[str] = []
        resolved_style = self._resolve_style(style, assumptions)
        resolved_length = self._resolve_length(max_length, assumptions)
        resolved_temperature = self._resolve_temperature(temperature, assumptions)
        run = PipelineRun(audit=audit)

        text_content = ""
        direct_entries: tuple[ExtractedEntry, ...] = ()
        if text is not None:
            text_content = self._process_text(text, resolved_style, audit)
            direct_entries = (ExtractedEntry(filename=None, kind="direct_input", content=text_content),)
            assumptions.append("Text prompt processed and refined")
        run.advance(PipelineState.TEXT_PROCESSED)

        narrative = ""
        content = ExtractedContent()
        if bundle.files:
            ingested = self.coordinator.ingest(bundle.files, resolved_style, audit)
            narrative = ingested.narrative
            content = ingested.extracted_content
            assumptions.append(f"{len(bundle.files)} file(s) processed for content extraction")
        content = replace(content, text=direct_entries + content.text)
        run.advance(PipelineState.FILES_PROCESSED)

        request = SynthesisRequest(
            text_content=text_content,
            file_narrative=narrative,
            extracted_content=content,
            style=resolved_style,
            max_length=resolved_length,
            temperature=resolved_temperature,
            input_text=text,
            files=bundle.files,
        )
        synthesis = self.synthesizer.synthesize(request, assumptions)
        run.advance(PipelineState.SYNTHESIZED)

        validation = synthesis.validation
        for warning in validation.warnings:
            audit.record("warning", "synthesis.warning", warning=warning)
        assumptions = synthesis.assumptions
        run.advance(PipelineState.VALIDATED)
        run.advance(PipelineState.DONE)

        result_id = f"ref_{int(time.time() * 1000)}_{uuid4().hex[:9]}"
        audit.record("info", "refine.completed", id=result_id, warnings=len(validation.warnings))
        metadata = {
            "style": resolved_style.value,
            "max_length": resolved_length,
            "temperature": resolved_temperature,
            "has_text": text is not None,
            "files_count": len(bundle.files),
            "file_types": [file_ref.declared_mime for file_ref in bundle.files],
            "file_names": [file_ref.original_name for file_ref in bundle.files],
            "content_types": content.content_types(),
            "validation": validation.to_dict(),
            "text_analysis": analyze_text(text).to_dict() if text is not None else None,
            "pipeline": [state.value for state in run.visited],
            "audit_events": audit.count(),
        }
        return RefinedPromptResult(
            id=result_id,
            refined_prompt=synthesis.prompt,
            style=resolved_style.value,
            metadata=metadata,
            extracted_content=content,
            assumptions=tuple(assumptions),
            timestamp=datetime.now(tz=UTC).isoformat(),
        )

    def refine_batch(self, prompts: Iterable[str], style: str | None = None) -> list[RefinedPromptResult]:
        """Refine each text prompt on its own, in order."""

        return [
            self.refine(InputBundle(text=prompt), style=style, max_length=self.config.default_max_length)
            for prompt in prompts
        ]

    def _process_text(self, text: str, style: Style, audit: AuditTrail) -> str:
        try:
            return self.synthesizer.refine_text(text, style)
        except Exception as error:  # noqa: BLE001
            audit.record("error", "refine.text_failed", error=str(error))
            return f"[TEXT INPUT]: {text}\n[STYLE: {style.value.upper()}]"

    def _resolve_style(self, style: str | None, assumptions: list[str]) -> Style:
        requested = style if style is not None else self.config.default_style
        if not Style.is_known(requested):
            assumptions.append(f"Unknown style '{requested}' replaced with 'general'")
        return Style.parse(requested)

    def _resolve_length(self, max_length: int | None, assumptions: list[str]) -> int:
        if max_length is None:
            return self.config.default_max_length
        if max_length <= 0:
            assumptions.append(
                f"Target length {max_length} replaced with {self.config.default_max_length} words"
            )
            return self.config.default_max_length
        return max_length

    def _resolve_temperature(self, temperature: float | None, assumptions: list[str]) -> float:
        if temperature is None:
            return self.config.default_temperature
        clamped = min(max(temperature, 0.0), 1.0)
        if clamped != temperature:
            assumptions.append(f"Temperature {temperature:g} clamped to {clamped:g}")
        return clamped


__all__ = ["EMPTY_INPUT_MESSAGE", "PipelineRun", "PipelineState", "RefinementOrchestrator"]
