from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import typer
import uvicorn

from promptrefine import __version__
from promptrefine.config import settings
from promptrefine.exceptions import ValidationError
from promptrefine.extraction.types import FileRef
from promptrefine.pipeline.models import InputBundle
from promptrefine.pipeline.orchestrator import RefinementOrchestrator

app = typer.Typer(help="PromptRefine command line tool", add_completion=False)


def _version_callback(
    ctx: typer.Context,
    param: Any,
    value: bool,
) -> bool:
    if value:
        typer.echo(__version__)
        raise typer.Exit()
    return value


@app.callback()
def _main_callback(
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show the version and exit.",
    ),
) -> None:
    """Root entry point."""


@app.command(help="Refine a prompt from text and local files.")
def refine(
    files: list[Path] | None = typer.Argument(
        None,
        exists=True,
        dir_okay=False,
        readable=True,
        help="Files to extract content from.",
    ),
    text: str | None = typer.Option(None, "--text", "-t", help="Prompt text."),
    style: str = typer.Option(settings.default_style, "--style", "-s", help="Refinement style."),
    max_length: int = typer.Option(
        settings.default_max_length, "--max-length", help="Target length in words."
    ),
    temperature: float = typer.Option(
        settings.default_temperature, "--temperature", help="Creativity between 0 and 1."
    ),
    as_json: bool = typer.Option(False, "--json", help="Print the full result as JSON."),
) -> None:
    file_refs = tuple(FileRef.from_path(path) for path in files or [])
    orchestrator = RefinementOrchestrator(config=settings)
    try:
        result = orchestrator.refine(
            InputBundle(text=text, files=file_refs),
            style=style,
            max_length=max_length,
            temperature=temperature,
        )
    except ValidationError as error:
        typer.echo(f"Error: {error}", err=True)
        raise typer.Exit(code=1) from error

    if as_json:
        typer.echo(json.dumps(result.to_dict(), indent=2, ensure_ascii=False, default=str))
        return
    typer.echo(result.refined_prompt)
    if result.assumptions:
        typer.echo("Assumptions:")
        for assumption in result.assumptions:
            typer.echo(f"- {assumption}")


@app.command(help="Run the HTTP API (FastAPI).")
def serve(
    host: str = typer.Option("127.0.0.1", "--host", help="Bind address."),
    port: int = typer.Option(8000, "--port", help="HTTP port."),
    reload: bool = typer.Option(False, "--reload", help="Enable auto-reload."),
) -> None:
    uvicorn.run("promptrefine.api.main:app", host=host, port=port, reload=reload, factory=False)


def main() -> None:  # pragma: no cover - delegated to Typer
    app()


__all__ = ["app", "main"]
