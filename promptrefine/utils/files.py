from __future__ import annotations

import math
import mimetypes
import shutil
from datetime import UTC, datetime
from pathlib import Path
from typing import IO
from uuid import uuid4

_SIZE_UNITS = ("Bytes", "KB", "MB", "GB")

mimetypes.add_type("text/markdown", ".md")
mimetypes.add_type("text/markdown", ".markdown")


def timestamped_stem(prefix: str) -> str:
    """Return a safe stem combining prefix, timestamp and a random suffix."""

    now = datetime.now(tz=UTC).strftime("%Y%m%dT%H%M%S")
    return f"{prefix}-{now}-{uuid4().hex[:8]}"


def resolve_upload_path(original_name: str | None, directory: Path) -> Path:
    """Return a collision-free path for staging an upload, keeping its extension."""

    extension = Path(original_name or "upload.bin").suffix
    stem = timestamped_stem("upload")
    directory.mkdir(parents=True, exist_ok=True)
    return directory / f"{stem}{extension}"


def save_stream_to_path(stream: IO[bytes], destination: Path) -> Path:
    """Persist a binary stream to the destination path."""

    destination.parent.mkdir(parents=True, exist_ok=True)
    with destination.open("wb") as handle:
        shutil.copyfileobj(stream, handle)
    return destination


def guess_mimetype(path: Path, fallback: str = "application/octet-stream") -> str:
    """Guess mimetype using Python's mimetypes library."""

    guess, _ = mimetypes.guess_type(path.name)
    return guess or fallback


def format_file_size(size_bytes: int) -> str:
    """Render a byte count as "12.5 KB"."""

    if size_bytes <= 0:
        return "0 Bytes"
    index = min(int(math.floor(math.log(size_bytes, 1024))), len(_SIZE_UNITS) - 1)
    value = round(size_bytes / (1024**index), 2)
    return f"{value:g} {_SIZE_UNITS[index]}"


__all__ = [
    "format_file_size",
    "guess_mimetype",
    "resolve_upload_path",
    "save_stream_to_path",
    "timestamped_stem",
]
