from __future__ import annotations

import sys
from collections.abc import Callable, Iterator
from pathlib import Path
from types import TracebackType

import pytest
from fastapi.testclient import TestClient

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from promptrefine.api.main import app, get_orchestrator, get_settings  # noqa: E402
from promptrefine.config import Settings  # noqa: E402
from promptrefine.exceptions import OcrUnavailableError  # noqa: E402
from promptrefine.extraction.types import FileRef  # noqa: E402
from promptrefine.ingest.service import IngestionCoordinator  # noqa: E402
from promptrefine.pipeline.orchestrator import RefinementOrchestrator  # noqa: E402


class FakeOcrSession:
    def __init__(self, text: str = "Quarterly revenue chart", confidence: float = 0.91) -> None:
        self.text = text
        self.confidence = confidence
        self.available = True
        self.entered = 0
        self.exited = 0
        self.calls: list[Path] = []

    def __enter__(self) -> FakeOcrSession:
        self.entered += 1
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        self.exited += 1

    def recognize(self, path: Path) -> tuple[str, float]:
        self.calls.append(path)
        if not self.available:
            msg = "tesseract is not installed"
            raise OcrUnavailableError(msg)
        return self.text, self.confidence


@pytest.fixture()
def temp_settings(tmp_path: Path) -> Settings:
    return Settings(upload_dir=tmp_path / "uploads", audit_dir=tmp_path / "audit")


@pytest.fixture()
def fake_ocr() -> FakeOcrSession:
    return FakeOcrSession()


@pytest.fixture()
def make_file_ref(tmp_path: Path) -> Callable[..., FileRef]:
    def factory(name: str, content: bytes | str, mime: str) -> FileRef:
        path = tmp_path / name
        if isinstance(content, str):
            path.write_text(content, encoding="utf-8")
        else:
            path.write_bytes(content)
        return FileRef(
            original_name=name,
            stored_path=path,
            declared_mime=mime,
            size_bytes=path.stat().st_size,
        )

    return factory


@pytest.fixture()
def coordinator(temp_settings: Settings, fake_ocr: FakeOcrSession) -> IngestionCoordinator:
    return IngestionCoordinator(config=temp_settings, ocr_factory=lambda: fake_ocr)


@pytest.fixture()
def orchestrator(
    temp_settings: Settings,
    coordinator: IngestionCoordinator,
) -> RefinementOrchestrator:
    return RefinementOrchestrator(config=temp_settings, coordinator=coordinator)


@pytest.fixture()
def client(
    temp_settings: Settings,
    orchestrator: RefinementOrchestrator,
) -> Iterator[TestClient]:
    app.dependency_overrides[get_settings] = lambda: temp_settings
    app.dependency_overrides[get_orchestrator] = lambda: orchestrator

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


def build_pdf(literals: list[str], version: str = "1.4") -> bytes:
    """Assemble a minimal byte buffer with one text object per literal."""

    body = "\n".join(f"BT /F1 12 Tf 72 700 Td ({literal}) Tj ET" for literal in literals)
    return (
        f"%PDF-{version}\n1 0 obj\n<< /Type /Catalog >>\nendobj\n"
        f"2 0 obj\n<< /Length {len(body)} >>\nstream\n{body}\nendstream\nendobj\n%%EOF\n"
    ).encode("latin-1")


@pytest.fixture()
def make_pdf() -> Callable[..., bytes]:
    return build_pdf
