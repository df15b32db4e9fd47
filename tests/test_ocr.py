from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest
from PIL import Image
from pytesseract import TesseractNotFoundError

from promptrefine.exceptions import OcrUnavailableError
from promptrefine.extraction.ocr import TesseractSession


@pytest.fixture()
def sample_image(tmp_path: Path) -> Path:
    path = tmp_path / "scan.png"
    Image.new("L", (40, 20), color=255).save(path)
    return path


def test_session_reports_missing_engine(monkeypatch: pytest.MonkeyPatch, sample_image: Path) -> None:
    def missing() -> str:
        raise TesseractNotFoundError()

    monkeypatch.setattr("promptrefine.extraction.ocr.get_tesseract_version", missing)

    with TesseractSession() as session:
        assert session.available is False
        with pytest.raises(OcrUnavailableError):
            session.recognize(sample_image)


def test_closed_session_refuses_work(sample_image: Path) -> None:
    session = TesseractSession()
    with pytest.raises(OcrUnavailableError):
        session.recognize(sample_image)


def test_session_averages_word_confidence(monkeypatch: pytest.MonkeyPatch, sample_image: Path) -> None:
    monkeypatch.setattr("promptrefine.extraction.ocr.get_tesseract_version", lambda: "5.3.0")
    monkeypatch.setattr(
        "promptrefine.extraction.ocr.image_to_string",
        lambda image, lang: "  Quarterly revenue \n",
    )

    def fake_data(image: Any, lang: str, output_type: Any) -> dict[str, list[Any]]:
        assert lang == "deu"
        return {"conf": ["-1", "90", 80.0]}

    monkeypatch.setattr("promptrefine.extraction.ocr.image_to_data", fake_data)

    with TesseractSession(language="deu") as session:
        text, confidence = session.recognize(sample_image)

    assert text == "Quarterly revenue"
    assert confidence == 0.85
