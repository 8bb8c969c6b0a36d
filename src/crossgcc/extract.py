"""Source archive extraction."""

from __future__ import annotations

import tarfile
from pathlib import Path

from crossgcc.errors import ExtractionError


def extract_archive(archive: str | Path, destination: str | Path, *, expect: str) -> Path:
    """Unpack *archive* into *destination* and return the ``expect`` directory inside it."""
    archive_path = Path(archive)
    dest = Path(destination)
    if not archive_path.is_file():
        raise ExtractionError(
            f"Can't find archive {archive_path.name}.",
            context={"operation": "extract", "archive": str(archive_path)},
        )
    try:
        dest.mkdir(parents=True, exist_ok=True)
        with tarfile.open(archive_path, mode="r:*") as tar:
            tar.extractall(dest, filter="tar")
    except (tarfile.TarError, OSError, EOFError) as exc:
        raise ExtractionError(
            f"Decompressing {archive_path.name} failed.",
            hint="Re-run with --clean-all to discard a corrupt download.",
            context={"operation": "extract", "archive": str(archive_path), "error": str(exc)},
        ) from exc

    source = dest / expect
    if not source.is_dir():
        raise ExtractionError(
            f"Archive {archive_path.name} did not contain {expect}/.",
            context={"operation": "extract", "archive": str(archive_path), "expected": expect},
        )
    return source
