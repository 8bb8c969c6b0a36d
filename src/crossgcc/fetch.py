"""Source archive download with skip-if-present and optional integrity check."""

from __future__ import annotations

import hashlib
import os
from pathlib import Path
from urllib.error import URLError
from urllib.request import urlopen

from crossgcc.errors import DownloadError

_CHUNK = 1 << 20


def download_archive(url: str, destination: str | Path, *, sha256: str | None = None) -> bool:
    """Fetch *url* into *destination* unless it already exists.

    Returns ``True`` when a download happened.  Partial payloads only ever
    exist under a ``.part`` name.
    """
    target = Path(destination)
    if target.is_file():
        if sha256:
            _assert_hash_matches(target, expected_sha256=sha256, url=url)
        return False

    temp_path = target.with_name(target.name + ".part")
    digest = hashlib.sha256()
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        with urlopen(url) as response, temp_path.open("wb") as handle:  # noqa: S310
            while chunk := response.read(_CHUNK):
                digest.update(chunk)
                handle.write(chunk)
    except (URLError, OSError) as exc:
        temp_path.unlink(missing_ok=True)
        raise DownloadError(
            f"Download of {target.name} failed.",
            hint="Check network access or pass --mirror with a reachable GNU mirror.",
            context={"operation": "download", "url": url, "error": str(exc)},
        ) from exc

    actual_sha256 = digest.hexdigest()
    if sha256 and actual_sha256 != sha256:
        temp_path.unlink(missing_ok=True)
        raise DownloadError(
            "Downloaded archive hash mismatch.",
            hint="Verify the mirror or update the expected checksum.",
            context={
                "operation": "download",
                "url": url,
                "expected": sha256,
                "actual": actual_sha256,
            },
        )
    os.replace(temp_path, target)
    return True


def _assert_hash_matches(path: Path, *, expected_sha256: str, url: str) -> None:
    digest = hashlib.sha256()
    try:
        with path.open("rb") as handle:
            while chunk := handle.read(_CHUNK):
                digest.update(chunk)
    except OSError as exc:
        raise DownloadError(
            f"Cannot read existing archive {path.name}.",
            hint="Re-run with --clean-all to force a fresh download.",
            context={"operation": "download", "path": str(path), "error": str(exc)},
        ) from exc
    actual_sha256 = digest.hexdigest()
    if actual_sha256 != expected_sha256:
        raise DownloadError(
            "Existing archive hash mismatch.",
            hint="Re-run with --clean-all to force a fresh download.",
            context={
                "operation": "download",
                "path": str(path),
                "url": url,
                "expected": expected_sha256,
                "actual": actual_sha256,
            },
        )
