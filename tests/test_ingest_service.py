from __future__ import annotations

from collections.abc import Callable
from io import BytesIO
from pathlib import Path

import pytest
from PIL import Image

from promptrefine.extraction.types import FileRef
from promptrefine.ingest.service import NARRATIVE_HEADER, IngestionCoordinator
from promptrefine.synthesis.styles import GENERIC_FILE_GUIDANCE
from promptrefine.utils.audit import AuditTrail

NOTES = (
    "Meeting notes for the weather project. The api must expose an endpoint for forecasts. "
    "The dashboard should refresh every hour. Contact the team before release."
)


def _png_bytes() -> bytes:
    buffer = BytesIO()
    Image.new("RGB", (32, 16), color=(200, 200, 200)).save(buffer, format="PNG")
    return buffer.getvalue()


def test_ingest_mixed_batch_in_order(
    coordinator: IngestionCoordinator,
    make_file_ref: Callable[..., FileRef],
    make_pdf: Callable[..., bytes],
    fake_ocr,
) -> None:
    files = [
        make_file_ref("notes.txt", NOTES, "text/plain"),
        make_file_ref("chart.png", _png_bytes(), "image/png"),
        make_file_ref("archive.zip", b"PK\x03\x04", "application/zip"),
        make_file_ref("missing-words.pdf", make_pdf(["Short."]), "application/pdf"),
    ]
    audit = AuditTrail()

    outcome = coordinator.ingest(files, "technical", audit)
    narrative = outcome.narrative

    assert narrative.startswith(NARRATIVE_HEADER)
    positions = [narrative.index(f"### File {n}: {f.original_name}") for n, f in enumerate(files, 1)]
    assert positions == sorted(positions)
    assert "- **Type:** text/plain" in narrative
    assert "- **Size:** 0.00 MB" in narrative
    assert "- **Extension:** .zip" in narrative
    assert "- **Extraction:** Successful" in narrative
    assert "- **Content:** Unsupported file type for detailed extraction" in narrative
    assert "- **OCR Confidence:** 91%" in narrative
    assert "Extract specifications, procedures, data, requirements, and technical details." in narrative
    assert "Analyze diagrams, schematics, data visualizations, or technical illustrations." in narrative
    assert GENERIC_FILE_GUIDANCE in narrative

    content = outcome.extracted_content
    assert [entry.filename for entry in content.documents] == ["notes.txt", "missing-words.pdf"]
    assert content.documents[0].extraction_success
    assert content.documents[0].word_count > 0
    assert not content.documents[1].extraction_success
    assert content.images[0].content == "Quarterly revenue chart"
    assert content.text[0].kind == "unsupported"
    assert content.text[0].mime_type == "application/zip"

    assert fake_ocr.entered == 1
    assert fake_ocr.exited == 1
    assert audit.count("warning") == 1


def test_ocr_session_not_opened_without_images(
    coordinator: IngestionCoordinator,
    make_file_ref: Callable[..., FileRef],
    fake_ocr,
) -> None:
    coordinator.ingest([make_file_ref("notes.txt", NOTES, "text/plain")], "general")

    assert fake_ocr.entered == 0


def test_failed_extraction_is_reported(
    coordinator: IngestionCoordinator,
    tmp_path: Path,
) -> None:
    gone = FileRef("gone.pdf", tmp_path / "gone.pdf", "application/pdf", 10)

    outcome = coordinator.ingest([gone], "analytical")

    assert "- **Extraction:** Failed" in outcome.narrative
    assert "- **Note:** File included as context reference" in outcome.narrative
    entry = outcome.extracted_content.documents[0]
    assert not entry.extraction_success
    assert "gone.pdf" in entry.content


def test_processing_error_is_isolated_per_file(
    coordinator: IngestionCoordinator,
    make_file_ref: Callable[..., FileRef],
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    from promptrefine.analysis.analyzer import analyze_text

    def flaky_analysis(text: str):
        if "boom" in text:
            msg = "analysis exploded while scanning the uploaded document body"
            raise RuntimeError(msg)
        return analyze_text(text)

    monkeypatch.setattr("promptrefine.ingest.service.analyze_text", flaky_analysis)
    files = [
        make_file_ref("first.txt", "boom goes the first file", "text/plain"),
        make_file_ref("second.txt", NOTES, "text/plain"),
    ]
    audit = AuditTrail()

    outcome = coordinator.ingest(files, "general", audit)

    assert "- **Status:** Processing error" in outcome.narrative
    assert "- **Error:** analysis exploded while scanning the uploaded docu\n" in outcome.narrative
    assert "### File 2: second.txt" in outcome.narrative
    assert [entry.filename for entry in outcome.extracted_content.documents] == ["second.txt"]
    assert audit.count("error") == 1


def test_ocr_session_released_when_batch_fails(
    coordinator: IngestionCoordinator,
    make_file_ref: Callable[..., FileRef],
    monkeypatch: pytest.MonkeyPatch,
    fake_ocr,
) -> None:
    def broken_guidance(category, style) -> str:
        msg = "guidance table unavailable"
        raise KeyError(msg)

    monkeypatch.setattr("promptrefine.ingest.service.file_guidance", broken_guidance)

    with pytest.raises(KeyError):
        coordinator.ingest([make_file_ref("chart.png", _png_bytes(), "image/png")], "general")

    assert fake_ocr.entered == 1
    assert fake_ocr.exited == 1


def test_unknown_style_uses_analytical_guidance(
    coordinator: IngestionCoordinator,
    make_file_ref: Callable[..., FileRef],
) -> None:
    outcome = coordinator.ingest([make_file_ref("notes.txt", NOTES, "text/plain")], "concise")

    assert "Analyze arguments, evidence, logic, structure, and conclusions." in outcome.narrative


class RefusingOcrSession:
    def __enter__(self) -> RefusingOcrSession:
        msg = "tesseract could not start"
        raise RuntimeError(msg)

    def __exit__(self, *exc_info: object) -> None:
        return None


def test_ocr_session_failure_leaves_placeholder(
    temp_settings,
    make_file_ref: Callable[..., FileRef],
) -> None:
    coordinator = IngestionCoordinator(config=temp_settings, ocr_factory=RefusingOcrSession)
    files = [
        make_file_ref("chart.png", _png_bytes(), "image/png"),
        make_file_ref("notes.txt", NOTES, "text/plain"),
    ]
    audit = AuditTrail()

    outcome = coordinator.ingest(files, "general", audit)

    image = outcome.extracted_content.images[0]
    assert not image.extraction_success
    assert image.error == "tesseract could not start"
    assert image.metadata["confidence"] == 0.75
    assert outcome.extracted_content.documents[0].extraction_success
    assert "- **Extraction:** Failed" in outcome.narrative
    assert [event.event for event in audit.events if event.level == "error"] == ["ocr.session_failed"]
