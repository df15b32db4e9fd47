from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from fastapi import Depends, FastAPI, File, Form, HTTPException, UploadFile
from pydantic import BaseModel

from promptrefine import __version__
from promptrefine.config import Settings, settings
from promptrefine.exceptions import ValidationError
from promptrefine.ingest.staging import staged_uploads
from promptrefine.pipeline.models import InputBundle
from promptrefine.pipeline.orchestrator import EMPTY_INPUT_MESSAGE, RefinementOrchestrator
from promptrefine.synthesis.styles import Style

app = FastAPI(title="PromptRefine", version=__version__)


def get_settings() -> Settings:
    return settings


def get_orchestrator(config: Settings = Depends(get_settings)) -> RefinementOrchestrator:
    return RefinementOrchestrator(config=config)


class RefineResponse(BaseModel):
    success: bool = True
    id: str
    original_prompt: str
    refined_prompt: str
    style: str
    metadata: dict[str, Any]
    extracted_content: dict[str, list[dict[str, Any]]]
    assumptions: list[str]
    timestamp: str


class BatchRequest(BaseModel):
    prompts: list[str]
    style: str = Style.GENERAL.value
    consistency_check: bool = False


class BatchItem(BaseModel):
    original: str
    refined: str


class BatchResponse(BaseModel):
    success: bool = True
    batch_id: str
    results: list[BatchItem]
    style: str
    consistency_check: bool
    timestamp: str


@app.get("/")
def index() -> dict[str, Any]:
    return {
        "message": "Prompt Refinement System API",
        "version": __version__,
        "styles": [style.value for style in Style],
        "endpoints": {
            "health": "GET /health",
            "refine": "POST /refine",
            "batch": "POST /refine/batch",
        },
    }


@app.get("/health")
def health(config: Settings = Depends(get_settings)) -> dict[str, Any]:
    return {
        "status": "healthy",
        "service": "prompt-refinement-system",
        "version": __version__,
        "timestamp": datetime.now(tz=UTC).isoformat(),
        "max_files": config.max_files,
        "max_file_size": config.max_file_size,
        "max_text_length": config.max_text_length,
    }


@app.post("/refine", response_model=RefineResponse)
async def refine(
    text: str | None = Form(default=None),
    style: str = Form(default=Style.GENERAL.value),
    max_length: int | None = Form(default=None),
    temperature: float | None = Form(default=None),
    files: list[UploadFile] | None = File(default=None),
    config: Settings = Depends(get_settings),
    orchestrator: RefinementOrchestrator = Depends(get_orchestrator),
) -> RefineResponse:
    uploads = files or []
    has_text = bool(text and text.strip())
    if not has_text and not uploads:
        raise HTTPException(status_code=400, detail=EMPTY_INPUT_MESSAGE)
    if has_text and len(text or "") > config.max_text_length:
        raise HTTPException(
            status_code=400,
            detail=f"Text input must be less than {config.max_text_length} characters",
        )
    if len(uploads) > config.max_files:
        raise HTTPException(status_code=400, detail=f"At most {config.max_files} files are accepted")

    try:
        with staged_uploads(uploads, config.upload_dir, config.max_file_size) as file_refs:
            bundle = InputBundle(text=text if has_text else None, files=tuple(file_refs))
            result = orchestrator.refine(bundle, style, max_length, temperature)
    except ValidationError as error:
        raise HTTPException(status_code=400, detail=str(error)) from error

    original = (text or "").strip() if has_text else "File-based request"
    return RefineResponse(original_prompt=original, **result.to_dict())


@app.post("/refine/batch", response_model=BatchResponse)
def refine_batch(
    payload: BatchRequest,
    orchestrator: RefinementOrchestrator = Depends(get_orchestrator),
) -> BatchResponse:
    if not payload.prompts:
        raise HTTPException(status_code=400, detail="Prompts must be a non-empty array")
    try:
        results = orchestrator.refine_batch(payload.prompts, style=payload.style)
    except ValidationError as error:
        raise HTTPException(status_code=400, detail=str(error)) from error

    now = datetime.now(tz=UTC)
    return BatchResponse(
        batch_id=f"batch_{int(now.timestamp() * 1000)}",
        results=[
            BatchItem(original=prompt, refined=result.refined_prompt)
            for prompt, result in zip(payload.prompts, results)
        ],
        style=payload.style,
        consistency_check=payload.consistency_check,
        timestamp=now.isoformat(),
    )


__all__ = ["app", "get_orchestrator", "get_settings"]
