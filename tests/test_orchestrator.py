from __future__ import annotations

import json
from collections.abc import Callable
from io import BytesIO
from pathlib import Path

import pytest
from PIL import Image

from promptrefine.config import Settings
from promptrefine.exceptions import ValidationError
from promptrefine.extraction.types import FileRef
from promptrefine.ingest.service import IngestionCoordinator
from promptrefine.pipeline.models import InputBundle
from promptrefine.pipeline.orchestrator import PipelineRun, PipelineState, RefinementOrchestrator
from promptrefine.synthesis.styles import OBJECTIVES, Style
from promptrefine.synthesis.synthesizer import PromptValidation
from promptrefine.utils.audit import AuditTrail

WEATHER = "Create a weather dashboard that should show 7-day forecasts"
FULL_PIPELINE = ["start", "text_processed", "files_processed", "synthesized", "validated", "done"]


def _png_bytes() -> bytes:
    buffer = BytesIO()
    Image.new("RGB", (24, 12), color=(180, 180, 180)).save(buffer, format="PNG")
    return buffer.getvalue()


def test_weather_dashboard_end_to_end(orchestrator: RefinementOrchestrator) -> None:
    result = orchestrator.refine(InputBundle(text=WEATHER), style="technical")

    assert OBJECTIVES[Style.TECHNICAL] in result.refined_prompt
    assert "show 7-day forecasts" in result.refined_prompt
    assert result.metadata["style"] == "technical"
    assert result.style == "technical"
    assert result.metadata["pipeline"] == FULL_PIPELINE
    assert result.metadata["validation"]["valid"] is True
    assert result.metadata["content_types"] == ["text"]
    assert result.metadata["text_analysis"]["word_count"] == 10
    assert result.assumptions == ("Text prompt processed and refined",)
    assert result.extracted_content.text[0].kind == "direct_input"
    assert result.id.startswith("ref_")


def test_empty_bundle_is_rejected(orchestrator: RefinementOrchestrator) -> None:
    with pytest.raises(ValidationError):
        orchestrator.refine(InputBundle())
    with pytest.raises(ValidationError):
        orchestrator.refine(InputBundle(text="   \n"))


@pytest.mark.parametrize("style", list(Style))
def test_every_style_produces_a_prompt(orchestrator: RefinementOrchestrator, style: Style) -> None:
    result = orchestrator.refine(InputBundle(text="Explain how tides work"), style=style.value)

    assert result.refined_prompt
    assert OBJECTIVES[style] in result.refined_prompt


def test_unknown_style_and_temperature_are_noted(orchestrator: RefinementOrchestrator) -> None:
    result = orchestrator.refine(InputBundle(text="Plan a picnic"), style="poetic", temperature=1.5)

    assert result.style == "general"
    assert result.metadata["temperature"] == 1.0
    assert "Unknown style 'poetic' replaced with 'general'" in result.assumptions
    assert "Temperature 1.5 clamped to 1" in result.assumptions
    assert "Creativity Level:** 1/1.0" in result.refined_prompt


def test_corrupted_pdf_still_completes(orchestrator: RefinementOrchestrator, tmp_path: Path) -> None:
    broken = FileRef("report.pdf", tmp_path / "report.pdf", "application/pdf", 4096)

    result = orchestrator.refine(InputBundle(files=(broken,)), style="analytical")

    assert result.metadata["pipeline"][-1] == "done"
    assert result.metadata["has_text"] is False
    assert result.metadata["text_analysis"] is None
    assert result.metadata["content_types"] == ["documents"]
    entry = result.extracted_content.documents[0]
    assert not entry.extraction_success
    assert "report.pdf" in entry.content
    assert "1 file(s) processed for content extraction" in result.assumptions
    assert "- **Extraction:** Failed" in result.refined_prompt


def test_files_and_text_are_combined(
    orchestrator: RefinementOrchestrator,
    make_file_ref: Callable[..., FileRef],
) -> None:
    notes = make_file_ref("notes.txt", "The station must log humidity every hour for the report.", "text/plain")

    result = orchestrator.refine(InputBundle(text=WEATHER, files=(notes,)), style="general", max_length=250)

    assert result.metadata["files_count"] == 1
    assert result.metadata["file_names"] == ["notes.txt"]
    assert result.metadata["file_types"] == ["text/plain"]
    assert result.metadata["content_types"] == ["text", "documents"]
    assert "## UPLOADED FILES ANALYSIS" in result.refined_prompt
    assert "Approximately 250 words" in result.refined_prompt
    assert "Text input (59 chars) + 1 file(s): TXT [2 processing assumptions]" in result.refined_prompt


def test_text_failure_falls_back_to_plain_block(
    orchestrator: RefinementOrchestrator,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    def explode(text: str, style: Style) -> str:
        msg = "refinement offline"
        raise RuntimeError(msg)

    monkeypatch.setattr(orchestrator.synthesizer, "refine_text", explode)

    result = orchestrator.refine(InputBundle(text="Write a haiku"), style="creative")

    assert "[TEXT INPUT]: Write a haiku\n[STYLE: CREATIVE]" in result.refined_prompt
    assert result.metadata["pipeline"] == FULL_PIPELINE


def test_audit_events_are_written(orchestrator: RefinementOrchestrator, temp_settings: Settings) -> None:
    result = orchestrator.refine(InputBundle(text=WEATHER))

    files = list(Path(temp_settings.audit_dir).glob("refine-*.jsonl"))
    assert len(files) == 1
    events = [json.loads(line)["event"] for line in files[0].read_text(encoding="utf-8").splitlines()]
    assert events[0] == "refine.received"
    assert events[-1] == "refine.completed"
    assert events.count("refine.state") == 5
    assert result.metadata["audit_events"] == len(events)


def test_refine_batch_returns_independent_results(orchestrator: RefinementOrchestrator) -> None:
    results = orchestrator.refine_batch(["Summarize the minutes", "Draft a launch email"], style="concise")

    assert len(results) == 2
    assert results[0].id != results[1].id
    assert "Summarize the minutes" in results[0].refined_prompt
    assert all(result.style == "concise" for result in results)


def test_pipeline_run_is_strictly_sequential() -> None:
    run = PipelineRun(audit=AuditTrail())
    run.advance(PipelineState.TEXT_PROCESSED)

    with pytest.raises(RuntimeError):
        run.advance(PipelineState.VALIDATED)

    for state in list(PipelineState)[2:]:
        run.advance(state)
    with pytest.raises(RuntimeError):
        run.advance(PipelineState.DONE)
    assert run.state is PipelineState.DONE


class BrokenOcrSession:
    def __enter__(self) -> BrokenOcrSession:
        msg = "tesseract could not start"
        raise RuntimeError(msg)

    def __exit__(self, *exc_info: object) -> None:
        return None


def test_ocr_startup_failure_keeps_image_placeholder(
    temp_settings: Settings,
    make_file_ref: Callable[..., FileRef],
) -> None:
    orchestrator = RefinementOrchestrator(
        config=temp_settings,
        coordinator=IngestionCoordinator(config=temp_settings, ocr_factory=BrokenOcrSession),
    )
    chart = make_file_ref("chart.png", _png_bytes(), "image/png")

    result = orchestrator.refine(InputBundle(text="Summarize this chart", files=(chart,)))

    assert result.metadata["pipeline"] == FULL_PIPELINE
    image = result.extracted_content.images[0]
    assert not image.extraction_success
    assert image.metadata["confidence"] == 0.75
    assert image.content.startswith("[Placeholder OCR text for chart.png]")
    assert "- **Extraction:** Failed" in result.refined_prompt
    assert "- **OCR Confidence:** 75%" in result.refined_prompt


def test_refine_goes_through_synthesize(
    orchestrator: RefinementOrchestrator,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    calls: list[Style] = []
    original = orchestrator.synthesizer.synthesize

    def recording(request, assumptions=()):
        calls.append(request.style)
        return original(request, assumptions)

    def thin(prompt: str, style: Style) -> PromptValidation:
        return PromptValidation(valid=False, warnings=("too thin",), prompt_length=len(prompt), section_count=0)

    monkeypatch.setattr(orchestrator.synthesizer, "synthesize", recording)
    monkeypatch.setattr(orchestrator.synthesizer, "validate", thin)

    result = orchestrator.refine(InputBundle(text=WEATHER), style="technical")

    assert calls == [Style.TECHNICAL]
    assert result.metadata["pipeline"] == FULL_PIPELINE
    assert result.metadata["validation"]["warnings"] == ["too thin"]
    assert "Validation: too thin" in result.assumptions
    assert "[2 processing assumptions]" in result.refined_prompt
