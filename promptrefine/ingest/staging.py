from __future__ import annotations

from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from pathlib import Path
from tempfile import TemporaryDirectory

from fastapi import UploadFile

from promptrefine.exceptions import ValidationError
from promptrefine.extraction.types import FileRef
from promptrefine.utils.files import format_file_size, guess_mimetype, resolve_upload_path, save_stream_to_path


def stage_upload(upload: UploadFile, directory: Path, max_size: int) -> FileRef:
    """Write an upload to ``directory`` and describe it as a :class:`FileRef`."""

    upload.file.seek(0)
    destination = resolve_upload_path(upload.filename, directory)
    save_stream_to_path(upload.file, destination)
    size_bytes = destination.stat().st_size
    original_name = upload.filename or destination.name
    if size_bytes > max_size:
        msg = f"{original_name} exceeds the {format_file_size(max_size)} upload limit"
        raise ValidationError(msg)
    return FileRef(
        original_name=original_name,
        stored_path=destination,
        declared_mime=upload.content_type or guess_mimetype(destination),
        size_bytes=size_bytes,
    )


@contextmanager
def staged_uploads(
    uploads: Sequence[UploadFile],
    upload_dir: Path,
    max_size: int,
) -> Iterator[list[FileRef]]:
    """Stage uploads in a per-request directory that is removed on exit."""

    upload_dir.mkdir(parents=True, exist_ok=True)
    with TemporaryDirectory(prefix="request-", dir=upload_dir) as scratch:
        directory = Path(scratch)
        yield [stage_upload(upload, directory, max_size) for upload in uploads]


__all__ = ["stage_upload", "staged_uploads"]
